"""event.py - The LogEvent record and the assembler that builds it.

A LogEvent is created once per logging call and handed, unchanged, to the
formatter and to the invocation buffer. It is the contract between the logger
core and any formatter implementation, so its field names are stable.

Message handling keeps the caller's original values. ``format_message()``
produces the text rendering on demand using %-style directives:

    %s      str() of the argument
    %d, %i  integer conversion ("NaN" when the value is not numeric)
    %f      float conversion ("NaN" when the value is not numeric)
    %j      JSON ("[Circular]" for self-referencing containers)
    %o, %O  object inspection (repr, or the traceback for exceptions)
    %%      a literal percent sign

Directives without a matching argument are left as written. Arguments left
over after substitution are appended, separated by a single space.
"""

import json
import re
import time
import traceback
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterable, NamedTuple, Optional, Tuple

from .levels import LogLevel
from .stack import StackFrame, capture_stack

if TYPE_CHECKING:
    from .buffer import BufferSnapshot, InvocationBuffer

_DIRECTIVE = re.compile(r"%[sdifjoO%]")


# ---------------------------------------------------------------------------
# Message rendering
# ---------------------------------------------------------------------------


def _describe_error(exc: BaseException) -> str:
    if exc.__traceback__ is not None:
        return "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ).rstrip()
    return f"{type(exc).__name__}: {exc}"


def inspect_value(value: Any) -> str:
    """Render any value as text without ever raising."""
    try:
        if isinstance(value, str):
            return value
        if isinstance(value, BaseException):
            return _describe_error(value)
        return repr(value)
    except Exception as exc:
        return f"<unrepresentable {type(exc).__name__}>"


def _convert(directive: str, value: Any) -> str:
    if directive == "s":
        return inspect_value(value)
    if directive in ("d", "i"):
        try:
            if isinstance(value, (int, float)):
                return str(int(value))
            return str(int(str(value).strip()))
        except (TypeError, ValueError, OverflowError):
            return "NaN"
        except Exception as exc:
            return f"<unrepresentable {type(exc).__name__}>"
    if directive == "f":
        try:
            return str(float(value))
        except (TypeError, ValueError):
            return "NaN"
        except Exception as exc:
            return f"<unrepresentable {type(exc).__name__}>"
    if directive == "j":
        try:
            return json.dumps(value, default=str)
        except ValueError:
            return "[Circular]"
        except Exception as exc:
            return f"<unrepresentable {type(exc).__name__}>"
    return inspect_value(value)


def format_message(format_string: Any, args: Iterable[Any] = ()) -> str:
    """Render a format value and its positional arguments to a single string.

    Example:
        >>> format_message("%s has %d items", ["cart", "3"])
        'cart has 3 items'
        >>> format_message("done", [{"ok": True}])
        "done {'ok': True}"
    """
    args = list(args)
    if not isinstance(format_string, str):
        return " ".join(inspect_value(v) for v in [format_string, *args])

    position = 0

    def substitute(match: "re.Match[str]") -> str:
        nonlocal position
        directive = match.group(0)
        if directive == "%%":
            return "%"
        if position >= len(args):
            return directive
        value = args[position]
        position += 1
        return _convert(directive[1], value)

    text = _DIRECTIVE.sub(substitute, format_string)
    remaining = args[position:]
    if remaining:
        text = " ".join([text, *(inspect_value(v) for v in remaining)])
    return text


class EventMessage(NamedTuple):
    """The caller's message value plus its positional arguments."""

    format_string: Any
    args: Tuple[Any, ...] = ()

    @property
    def kind(self) -> str:
        """``"text"``, ``"structured"``, ``"error"`` or ``"object"``."""
        if isinstance(self.format_string, str):
            return "text"
        if isinstance(self.format_string, Mapping):
            return "structured"
        if isinstance(self.format_string, BaseException):
            return "error"
        return "object"

    def render(self) -> str:
        return format_message(self.format_string, self.args)


# ---------------------------------------------------------------------------
# LogEvent
# ---------------------------------------------------------------------------


class LogEvent(NamedTuple):
    """Immutable record of one logging call.

    Attributes:
        logger_name: Name of the emitting logger, or None.
        timestamp: Wall-clock epoch milliseconds at assembly time.
        level: Emitting severity. Never ``LogLevel.OFF``.
        message: The caller's message and arguments.
        properties: Read-only copy of the logger's properties at call time.
        invocation_id: Invocation the event belongs to, or None.
        stack_trace: Caller frames, only for WARN and above.
        buffer: Snapshot of the invocation history, only for WARN and above
            when an invocation buffer is attached.
        sequence_number: 1-based position of the event within its
            invocation, or None when no buffer is attached.
    """

    logger_name: Optional[str]
    timestamp: int
    level: LogLevel
    message: EventMessage
    properties: Mapping
    invocation_id: Optional[str] = None
    stack_trace: Optional[Tuple[StackFrame, ...]] = None
    buffer: Optional["BufferSnapshot"] = None
    sequence_number: Optional[int] = None

    def render_message(self) -> str:
        return self.message.render()

    def condensed(self) -> "LogEvent":
        """Copy without stack and buffer, for storage inside a buffer."""
        if self.stack_trace is None and self.buffer is None:
            return self
        return self._replace(stack_trace=None, buffer=None)

    def to_dict(self) -> dict:
        """Plain-data view, e.g. for JSON serialisation in tests and formatters."""
        data = {
            "logger_name": self.logger_name,
            "timestamp": self.timestamp,
            "level": int(self.level),
            "message": {
                "format_string": self.message.format_string,
                "args": list(self.message.args),
            },
            "properties": dict(self.properties),
            "invocation_id": self.invocation_id,
            "stack_trace": None,
            "buffer": None,
            "sequence_number": self.sequence_number,
        }
        if self.stack_trace is not None:
            data["stack_trace"] = [frame._asdict() for frame in self.stack_trace]
        if self.buffer is not None:
            data["buffer"] = {
                "first_logs": [e.to_dict() for e in self.buffer.first_logs],
                "last_logs": [e.to_dict() for e in self.buffer.last_logs],
                "capacity": self.buffer.capacity,
            }
        return data


def assemble_event(
    level: LogLevel,
    message: Any,
    args: Iterable[Any],
    *,
    logger_name: Optional[str],
    properties: Mapping,
    invocation_id: Optional[str],
    buffer: Optional["InvocationBuffer"] = None,
) -> LogEvent:
    """Build the LogEvent for one logging call.

    The buffer is only read, never written: the snapshot reflects the events
    *before* this one, and ``sequence_number`` is the position this event
    will take once the logger adds it.
    """
    severe = level >= LogLevel.WARN
    return LogEvent(
        logger_name=logger_name,
        timestamp=int(time.time() * 1000),
        level=level,
        message=EventMessage(message, tuple(args)),
        properties=MappingProxyType(dict(properties)),
        invocation_id=invocation_id,
        stack_trace=tuple(capture_stack()) if severe else None,
        buffer=buffer.snapshot() if severe and buffer is not None else None,
        sequence_number=buffer.count() + 1 if buffer is not None else None,
    )
