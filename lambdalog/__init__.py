"""lambdalog/__init__.py - Public API for the lambdalog package.

lambdalog is a structured logger for short-lived, single-invocation functions
such as AWS Lambda handlers. Besides leveled, formatted output it keeps a
bounded history of the current invocation (its first and its most recent
events) and prints that history alongside every warning and error.

Quick start:
    from lambdalog import create_logger, invocation

    log = create_logger()                 # level from LOG_LEVEL, default info

    @invocation()                         # binds context.aws_request_id
    def handler(event, context):
        log.info("received %j", event)
        log.debug("looking up order %s", event["id"])   # buffered only
        log.error("order not found")      # printed with the history above

    # Per-component loggers share streams, formatter and history
    db_log = log.child({"name": "db", "table": "orders"})

    # Temporary properties
    log.scope("order_id", 42, lambda: log.info("charging"))

    # JSON output
    from lambdalog import JSONFormatter
    log.set_formatter(JSONFormatter())

Exported names:
    create_logger:     Factory returning a Logger, or a DisabledLogger for ``off``.
    Logger:            The logger core.
    DisabledLogger:    The inert variant.
    LogLevel:          Severity scale.
    LogEvent:          Record handed to formatters.
    LogFormatter:      Base class for formatters.
    LinearFormatter:   Plain-text formatter (default).
    JSONFormatter:     One JSON object per event.
    Stream:            Output/error sink pair.
    FileSink:          Append-to-file sink with rotation.
    InvocationBuffer:  First-N / last-N invocation history.
    LambdaLogHandler:  Bridge from the standard ``logging`` module.
    invocation:        Decorator binding the invocation id for a handler.
    ConfigurationError: Raised when a logger has nowhere to write.
"""

from .buffer import BufferSnapshot, InvocationBuffer
from .environment import Environment, ProcessEnvironment, StaticEnvironment
from .errors import ConfigurationError, LambdaLogError
from .event import EventMessage, LogEvent, format_message
from .formatters import JSONFormatter, LinearFormatter, LogFormatter
from .handler import LambdaLogHandler
from .instrument import invocation
from .levels import LogLevel, parse_level
from .logger import BaseLogger, DisabledLogger, Logger, create_logger, mask
from .stack import StackFrame
from .streams import FileSink, Stream

__all__ = [
    "create_logger",
    "Logger",
    "DisabledLogger",
    "BaseLogger",
    "LogLevel",
    "parse_level",
    "LogEvent",
    "EventMessage",
    "StackFrame",
    "format_message",
    "mask",
    "LogFormatter",
    "LinearFormatter",
    "JSONFormatter",
    "Stream",
    "FileSink",
    "InvocationBuffer",
    "BufferSnapshot",
    "Environment",
    "ProcessEnvironment",
    "StaticEnvironment",
    "LambdaLogHandler",
    "invocation",
    "LambdaLogError",
    "ConfigurationError",
]
__version__ = "0.1.0"
