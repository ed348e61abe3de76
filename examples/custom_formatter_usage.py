"""examples/custom_formatter_usage.py - Implement and plug in a custom formatter.

Shows two formatters:
    MemoryFormatter - keeps the raw LogEvents in a list (useful in tests).
    CompactFormatter - a one-line renderer built on LogFormatter.render().

Run:
    python examples/custom_formatter_usage.py
"""

import sys
from typing import List

from lambdalog import JSONFormatter, LogEvent, LogFormatter, Stream, StaticEnvironment, create_logger


class MemoryFormatter(LogFormatter):
    """Stores every event instead of writing it anywhere.

    Attributes:
        events: LogEvents in the order they were emitted.
    """

    def __init__(self) -> None:
        self.events: List[LogEvent] = []

    def format(self, event, streams) -> None:
        self.events.append(event)

    def render(self, event) -> str:  # pragma: no cover - format() is overridden
        return ""


class CompactFormatter(LogFormatter):
    """``LEVEL name key=value ... | message``, with the history count on errors."""

    def render(self, event: LogEvent) -> str:
        props = " ".join(f"{k}={v}" for k, v in event.properties.items())
        text = f"{event.level.label} {event.logger_name} {props} | {event.render_message()}"
        if event.buffer is not None:
            kept = len(event.buffer.first_logs) + len(event.buffer.last_logs)
            text += f" (history: {kept} of {event.sequence_number - 1} events)"
        return text + "\n"


if __name__ == "__main__":
    env = StaticEnvironment(invocation_id="req-demo")

    memory = MemoryFormatter()
    log = create_logger("demo", formatter=memory, environment=env)
    log.info("hello %s", "world")
    log.warn("disk at %d%%", 91)
    print(f"MemoryFormatter captured {len(memory.events)} events")
    print(f"  warn event saw {len(memory.events[1].buffer.first_logs)} earlier event(s)")

    compact = create_logger(
        "demo",
        suppress_default_streams=True,
        streams=[Stream("stdout", sys.stdout)],
        formatter=CompactFormatter(),
        environment=env,
    )
    compact.scope("order", 17, lambda: compact.info("charging card"))
    compact.error("card declined")

    compact.set_formatter(JSONFormatter(pretty=True, environment=env))
    compact.child({"component": "refunds"}).warn({"refund": 17, "reason": "declined"})
