"""handler.py - Bridge from the standard ``logging`` module into lambdalog.

Libraries used inside a function (boto3, requests, ...) log through
``logging``. Attaching a LambdaLogHandler routes those records through a
lambdalog logger, so they share its formatter, its properties and, most
importantly, its invocation buffer: a third-party warning shows up in the
history printed with the next error.

Typical usage::

    import logging
    from lambdalog import LambdaLogHandler, create_logger

    log = create_logger()
    logging.getLogger().addHandler(LambdaLogHandler(log))
    logging.getLogger().setLevel(logging.DEBUG)

Level mapping:
    CRITICAL -> fatal, ERROR -> error, WARNING -> warn, INFO -> info,
    DEBUG -> debug, anything lower -> trace.
"""

import logging
import threading

from .levels import LogLevel
from .logger import BaseLogger


def level_for_record(levelno: int) -> LogLevel:
    """Map a ``logging`` level number onto the lambdalog severity scale."""
    if levelno >= logging.CRITICAL:
        return LogLevel.FATAL
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARN
    if levelno >= logging.INFO:
        return LogLevel.INFO
    if levelno >= logging.DEBUG:
        return LogLevel.DEBUG
    return LogLevel.TRACE


def _skip_own_records(record: logging.LogRecord) -> bool:
    return not (record.name == "lambdalog" or record.name.startswith("lambdalog."))


class LambdaLogHandler(logging.Handler):
    """A logging.Handler that forwards every record to a lambdalog logger.

    Thresholds are applied by the target logger, not by this handler, so
    records below the logger's level still reach the invocation buffer.

    Records from lambdalog's own loggers are never forwarded, and neither
    is anything logged while this handler is already forwarding a record.
    Either would loop back into the target logger.

    Attributes:
        _target (BaseLogger): The logger receiving the records.
    """

    def __init__(self, target: BaseLogger, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._target = target
        self._local = threading.local()
        self.addFilter(_skip_own_records)

    @property
    def target(self) -> BaseLogger:
        return self._target

    def emit(self, record: logging.LogRecord) -> None:
        """Forward one record.

        The message is rendered by ``record.getMessage()``; an attached
        exception is passed as an extra argument so it is printed after it.
        """
        if getattr(self._local, "emitting", False):
            return
        self._local.emitting = True
        try:
            args = []
            if record.exc_info and record.exc_info[1] is not None:
                args.append(record.exc_info[1])
            self._target.log(level_for_record(record.levelno), record.getMessage(), *args)
        except Exception:
            # Never let a logging problem break the application.
            self.handleError(record)
        finally:
            self._local.emitting = False
