"""stack.py - Best-effort call-stack capture for warn-and-above events.

The captured frames give a formatter enough to say *where* a warning was
raised without the caller handing over an exception. Capture is deliberately
forgiving: frames the interpreter cannot describe (no line number) are
skipped, and frames belonging to lambdalog itself are dropped so the
outermost-first list ends at the caller's logging statement.
"""

import os
import traceback
from typing import List, NamedTuple, Optional

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


class StackFrame(NamedTuple):
    file: str
    method_name: str
    line_number: int
    column: Optional[int] = None


def _is_internal(filename: str) -> bool:
    return os.path.dirname(os.path.abspath(filename)) == _PACKAGE_DIR


def capture_stack(limit: Optional[int] = None) -> List[StackFrame]:
    """Return the current call stack, outermost frame first.

    Args:
        limit: Keep at most this many of the innermost caller frames.
            None keeps everything.

    Returns:
        A list of StackFrame. Never raises; an empty list means nothing
        usable could be captured.
    """
    try:
        summaries = traceback.extract_stack()
    except Exception:
        return []

    frames = []
    for summary in summaries:
        if summary.lineno is None or _is_internal(summary.filename):
            continue
        frames.append(
            StackFrame(
                file=summary.filename,
                method_name=summary.name or "<unknown>",
                line_number=summary.lineno,
                # colno only exists on Python 3.11+
                column=getattr(summary, "colno", None),
            )
        )
    if limit is not None:
        frames = frames[-limit:] if limit > 0 else []
    return frames
