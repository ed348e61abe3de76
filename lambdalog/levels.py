"""levels.py - Severity scale shared by loggers, events and formatters.

The six emitting levels are ordered ``TRACE < DEBUG < INFO < WARN < ERROR <
FATAL``. ``OFF`` sits above them and is only meaningful as a configured
threshold: a logger configured with it is replaced by a DisabledLogger, and
``log(LogLevel.OFF, ...)`` is a no-op.
"""

from enum import IntEnum
from typing import Optional


class LogLevel(IntEnum):
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5
    OFF = 6

    @property
    def label(self) -> str:
        """Upper-case name used by the formatters, e.g. ``"WARN"``."""
        return self.name


def parse_level(name: Optional[str], default: LogLevel = LogLevel.INFO) -> LogLevel:
    """Resolve a configured level name to a LogLevel.

    Matching is case-insensitive against ``trace``, ``debug``, ``info``,
    ``warn``, ``error``, ``fatal`` and ``off``. Anything else, including
    ``None`` and an empty string, resolves to ``default``.

    Example:
        >>> parse_level("Warn")
        <LogLevel.WARN: 3>
        >>> parse_level("verbose")
        <LogLevel.INFO: 2>
    """
    if not name:
        return default
    try:
        return LogLevel[name.strip().upper()]
    except KeyError:
        return default
