"""formatters.py - Rendering of LogEvents onto streams.

The logger hands every event that passes its threshold to a LogFormatter
together with the full stream list. The formatter decides, per stream, which
sink receives the text and what the text looks like. Two renderings ship with
the package:

    LinearFormatter  One human-readable line per event, plus the invocation
                     history under warnings and errors. The default.
    JSONFormatter    One JSON object per event, suited to log aggregation.

Formatters are total: a value that cannot be rendered produces a placeholder
line instead of an exception escaping into the caller's code.

Writing a custom formatter::

    class OneLine(LogFormatter):
        def render(self, event):
            return f"{event.level.label} {event.render_message()}\\n"

    log = create_logger().set_formatter(OneLine())
"""

import hashlib
import json
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .environment import Environment, default_environment
from .event import LogEvent
from .levels import LogLevel
from .streams import Stream, TextSink

_log = logging.getLogger(__name__)


class LogFormatter(ABC):
    """Base class for all formatters.

    Subclasses normally implement ``render()`` only; ``format()`` takes care
    of routing and of replacing a failed rendering with a placeholder.
    Formatters that need full control (e.g. to capture raw events) may
    override ``format()`` instead.
    """

    def format(self, event: LogEvent, streams: Sequence[Stream]) -> None:
        """Render ``event`` and write it to the appropriate sink of each stream.

        Args:
            event: The event to render.
            streams: Every stream configured on the emitting logger.
        """
        text = self._safe_render(event)
        for stream in streams:
            self.select_sink(event, stream).write(text)

    @abstractmethod
    def render(self, event: LogEvent) -> str:
        """Return the complete text (including trailing newline) for ``event``."""

    def select_sink(self, event: LogEvent, stream: Stream) -> TextSink:
        """WARN and above go to the error sink, everything else to output."""
        if event.level >= LogLevel.WARN:
            return stream.error_stream
        return stream.output_stream

    def _safe_render(self, event: LogEvent) -> str:
        try:
            return self.render(event)
        except Exception as exc:
            _log.debug("Could not render log event", exc_info=True)
            return f"<unrenderable event: {type(exc).__name__}: {exc}>\n"


def history_line(event: LogEvent) -> str:
    """``LOG #<n>: [<LEVEL>]: <message>`` for an event stored in a buffer."""
    return f"LOG #{event.sequence_number}: [{event.level.label}]: {event.render_message()}"


def _history(event: LogEvent) -> List[LogEvent]:
    if event.buffer is None or event.level <= LogLevel.INFO:
        return []
    return [*event.buffer.first_logs, *event.buffer.last_logs]


class LinearFormatter(LogFormatter):
    """Plain text, one line per event.

    Output format::

        [1700000000000 - INFO]: charging card
        [1700000000042 - ERROR]: card declined
        \tERROR: Printing the first and last 5 log messages to aid in issue reproduction:
        \tLOG #1: [INFO]: charging card
    """

    def render(self, event: LogEvent) -> str:
        label = event.level.label
        lines = [f"[{event.timestamp} - {label}]: {event.render_message()}"]

        if event.buffer is not None and event.level > LogLevel.INFO:
            capacity = event.buffer.capacity
            lines.append(
                f"\t{label}: Printing the first and last {capacity} log messages "
                "to aid in issue reproduction:"
            )
            lines.extend(f"\t{history_line(e)}" for e in event.buffer.first_logs)

            skipped = (event.sequence_number or 0) - (capacity * 2 + 1)
            if skipped > 0:
                lines.append(f"\t[... {skipped} more messages ...]")
            lines.extend(f"\t{history_line(e)}" for e in event.buffer.last_logs)

        return "\n".join(lines) + "\n"


class JSONFormatter(LogFormatter):
    """One JSON object per event.

    Keys: ``Timestamp``, ``Level``, ``Name`` (when set), ``Message``,
    ``MessageHash`` (for string messages), ``RequestId`` and ``LogCount``
    (inside an invocation), one key per logger property, and
    ``PreviousLogs`` for warnings and above with an invocation history.

    Attributes:
        _pretty (Optional[bool]): Force indentation on or off. None follows
            the environment's offline toggle at render time.
        _environment (Environment): Source of the offline toggle.
    """

    def __init__(
        self,
        pretty: Optional[bool] = None,
        environment: Optional[Environment] = None,
    ) -> None:
        self._pretty = pretty
        self._environment = environment or default_environment()

    def render(self, event: LogEvent) -> str:
        payload = {
            "Timestamp": event.timestamp,
            "Level": event.level.label,
        }
        if event.logger_name is not None:
            payload["Name"] = event.logger_name
        payload["Message"] = event.render_message()

        if isinstance(event.message.format_string, str):
            payload["MessageHash"] = message_hash(event.message.format_string)

        if event.invocation_id:
            payload["RequestId"] = event.invocation_id
            payload["LogCount"] = event.sequence_number

        for key, value in event.properties.items():
            payload[str(key)] = value

        history = _history(event)
        if history:
            payload["PreviousLogs"] = [history_line(e) for e in history]

        pretty = self._environment.is_offline if self._pretty is None else self._pretty
        return json.dumps(payload, indent=2 if pretty else None, default=str) + "\n"


def message_hash(format_string: str) -> str:
    """Short, stable id of a format string for grouping related messages."""
    digest = hashlib.md5(format_string.encode("utf-8")).hexdigest()
    return digest[:8].upper()
