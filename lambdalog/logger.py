"""logger.py - Logger core, the disabled variant, and the factory choosing between them.

Control flow of one logging call::

    log(level, message, *args)
      -> refresh invocation id, attach an InvocationBuffer on first sight of one
      -> assemble_event()         (stack + buffer snapshot for WARN and above)
      -> formatter.format()       only when level >= threshold
      -> buffer.add(event)        always, when a buffer is attached

Sharing between a logger and the children derived from it:

    properties   copied at child() time; later changes stay local
    streams      the same list object; add_stream() on either is seen by both
    formatter    the same object; set_formatter() rebinds only the receiver
    buffer       the same InvocationBuffer for the whole lineage

Use ``create_logger()`` rather than instantiating Logger directly: it resolves
the threshold and returns a DisabledLogger when the level is ``off``.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from .buffer import DEFAULT_CAPACITY, InvocationBuffer
from .environment import Environment, default_environment
from .errors import ConfigurationError
from .event import assemble_event
from .formatters import LinearFormatter, LogFormatter
from .levels import LogLevel, parse_level
from .streams import Stream, default_stream

_log = logging.getLogger(__name__)

T = TypeVar("T")


def mask(value: Union[str, int, float, None]) -> str:
    """Replace a sensitive value with a stable, irreversible marker.

    The MD5 digest lets someone holding the original value confirm it was
    seen, without the log revealing it.

    Example:
        >>> mask(None)
        '<private:undefined>'
        >>> mask("")
        '<private:empty string>'
        >>> mask("4111111111111111")
        "<private:masked> hash:'...'"    # 32 hex characters
    """
    if value is None:
        return "<private:undefined>"
    text = str(value)
    if not text:
        return "<private:empty string>"
    digest = hashlib.md5(text.encode("utf-8")).hexdigest()
    return f"<private:masked> hash:'{digest}'"


class BaseLogger(ABC):
    """Capability set shared by Logger and DisabledLogger."""

    def trace(self, message: Any, *args: Any) -> None:
        """Most granular data: inputs and outputs passed between functions."""
        self.log(LogLevel.TRACE, message, *args)

    def debug(self, message: Any, *args: Any) -> None:
        """Details that help someone unfamiliar with the code debug it."""
        self.log(LogLevel.DEBUG, message, *args)

    def info(self, message: Any, *args: Any) -> None:
        """Routine progress through the invocation."""
        self.log(LogLevel.INFO, message, *args)

    def warn(self, message: Any, *args: Any) -> None:
        """Something looks wrong and may cause problems further on."""
        self.log(LogLevel.WARN, message, *args)

    def error(self, message: Any, *args: Any) -> None:
        """An anticipated problem that needs attention."""
        self.log(LogLevel.ERROR, message, *args)

    def fatal(self, message: Any, *args: Any) -> None:
        """The invocation (or the process) is about to break."""
        self.log(LogLevel.FATAL, message, *args)

    @abstractmethod
    def log(self, level: LogLevel, message: Any, *args: Any) -> None: ...

    @abstractmethod
    def child(self, properties: Optional[Mapping[str, Any]] = None) -> "BaseLogger": ...

    @abstractmethod
    def add_log_property(self, key: str, value: Any) -> None: ...

    @abstractmethod
    def remove_log_property(self, key: str) -> None: ...

    @abstractmethod
    def scope(self, key: str, value: Any, fn: Callable[[], T]) -> T: ...

    @abstractmethod
    async def async_scope(self, key: str, value: Any, fn: Callable[[], Awaitable[T]]) -> T: ...

    @abstractmethod
    def set_formatter(self, formatter: LogFormatter) -> "BaseLogger": ...

    @abstractmethod
    def add_stream(self, stream: Stream) -> "BaseLogger": ...

    def mask(self, value: Union[str, int, float, None]) -> str:
        return mask(value)


class Logger(BaseLogger):
    """A leveled logger with properties, child derivation and invocation history.

    Attributes:
        _name (Optional[str]): Logger identity, carried on every event.
        _level (LogLevel): Threshold; events below it are buffered but not
            rendered. Fixed for the lifetime of the logger.
        _properties (dict): Key/value pairs attached to every event.
        _streams (list): Output destinations, possibly shared with relatives.
        _formatter (LogFormatter): Renders events onto the streams.
        _buffer (Optional[InvocationBuffer]): Invocation history, created on
            the first call that sees an invocation id.
        _parent (Optional[Logger]): Only used to find the lineage's buffer.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        level: LogLevel = LogLevel.INFO,
        *,
        streams: Optional[List[Stream]] = None,
        formatter: Optional[LogFormatter] = None,
        environment: Optional[Environment] = None,
        buffer_size: int = DEFAULT_CAPACITY,
    ) -> None:
        if level >= LogLevel.OFF:
            raise ValueError("use create_logger() to obtain a logger for level 'off'")
        self._environment = environment or default_environment()
        self._name = name
        self._level = LogLevel(level)
        self._properties: Dict[str, Any] = {}
        self._streams: List[Stream] = streams if streams is not None else []
        self._formatter: LogFormatter = formatter or LinearFormatter()
        self._buffer_size = buffer_size
        self._invocation_id = self._environment.invocation_id
        self._buffer: Optional[InvocationBuffer] = None
        if self._invocation_id:
            self._buffer = InvocationBuffer(buffer_size, self._environment)
        self._parent: Optional["Logger"] = None

    # ---------------------------------------------------------------------- #
    # Introspection
    # ---------------------------------------------------------------------- #

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def properties(self) -> Mapping[str, Any]:
        return dict(self._properties)

    @property
    def streams(self) -> List[Stream]:
        return self._streams

    @property
    def formatter(self) -> LogFormatter:
        return self._formatter

    @property
    def buffer(self) -> Optional[InvocationBuffer]:
        return self._buffer

    # ---------------------------------------------------------------------- #
    # Logging
    # ---------------------------------------------------------------------- #

    def log(self, level: LogLevel, message: Any, *args: Any) -> None:
        """Emit one event at ``level``.

        Raises:
            ConfigurationError: If the logger has no streams to write to.
        """
        if level >= LogLevel.OFF:
            return
        if not self._streams:
            raise ConfigurationError(
                "no output streams are configured and the default stream was suppressed"
            )

        self._refresh_invocation()

        event = assemble_event(
            LogLevel(level),
            message,
            args,
            logger_name=self._name,
            properties=self._properties,
            invocation_id=self._invocation_id,
            buffer=self._buffer,
        )

        if level >= self._level:
            self._formatter.format(event, self._streams)

        if self._buffer is not None:
            self._buffer.add(event)

    def _refresh_invocation(self) -> None:
        # A module-level logger is usually created before the first request
        # arrives, so the invocation id has to be looked up on every call.
        self._invocation_id = self._environment.invocation_id
        if self._invocation_id and self._buffer is None:
            self._buffer = self._lineage_buffer()

    def _lineage_buffer(self) -> InvocationBuffer:
        if self._buffer is not None:
            return self._buffer
        if self._parent is not None:
            self._buffer = self._parent._lineage_buffer()
        else:
            self._buffer = InvocationBuffer(self._buffer_size, self._environment)
        return self._buffer

    # ---------------------------------------------------------------------- #
    # Derivation and properties
    # ---------------------------------------------------------------------- #

    def child(self, properties: Optional[Mapping[str, Any]] = None) -> "Logger":
        """Derive a logger that adds ``properties`` to everything it logs.

        The special key ``name`` renames the child instead of becoming a
        property.

        Example:
            >>> api_log = log.child({"name": "api", "component": "http"})
        """
        overrides = dict(properties or {})
        name = overrides.pop("name", self._name)

        child = Logger(
            name,
            self._level,
            streams=self._streams,
            formatter=self._formatter,
            environment=self._environment,
            buffer_size=self._buffer_size,
        )
        child._buffer = self._buffer
        child._parent = self
        child._properties = {**self._properties, **overrides}
        child._properties.pop("name", None)
        return child

    def add_log_property(self, key: str, value: Any) -> None:
        self._properties[key] = value

    def remove_log_property(self, key: str) -> None:
        self._properties.pop(key, None)

    def scope(self, key: str, value: Any, fn: Callable[[], T]) -> T:
        """Run ``fn`` with ``key=value`` attached, removing it on every exit path."""
        self.add_log_property(key, value)
        try:
            return fn()
        finally:
            self.remove_log_property(key)

    async def async_scope(self, key: str, value: Any, fn: Callable[[], Awaitable[T]]) -> T:
        """Await ``fn()`` with ``key=value`` attached, removing it once it settles.

        Logging from other tasks while the awaitable is suspended also sees
        the property; one invocation is assumed to own the process.
        """
        self.add_log_property(key, value)
        try:
            return await fn()
        finally:
            self.remove_log_property(key)

    # ---------------------------------------------------------------------- #
    # Configuration
    # ---------------------------------------------------------------------- #

    def set_formatter(self, formatter: LogFormatter) -> "Logger":
        self._formatter = formatter
        return self

    def add_stream(self, stream: Stream) -> "Logger":
        self._streams.append(stream)
        return self

    def __repr__(self) -> str:  # pragma: no cover
        return f"Logger({self._name!r}, level={self._level.name})"


class DisabledLogger(BaseLogger):
    """Inert logger returned for the ``off`` level.

    Call sites use it exactly like a Logger; nothing is formatted, buffered
    or written. Scopes still run their function, and ``mask()`` still
    computes its result.
    """

    def log(self, level: LogLevel, message: Any, *args: Any) -> None:
        return None

    def child(self, properties: Optional[Mapping[str, Any]] = None) -> "DisabledLogger":
        return self

    def add_log_property(self, key: str, value: Any) -> None:
        return None

    def remove_log_property(self, key: str) -> None:
        return None

    def scope(self, key: str, value: Any, fn: Callable[[], T]) -> T:
        return fn()

    async def async_scope(self, key: str, value: Any, fn: Callable[[], Awaitable[T]]) -> T:
        return await fn()

    def set_formatter(self, formatter: LogFormatter) -> "DisabledLogger":
        return self

    def add_stream(self, stream: Stream) -> "DisabledLogger":
        return self

    def __repr__(self) -> str:  # pragma: no cover
        return "DisabledLogger()"


def create_logger(
    name: Optional[str] = None,
    *,
    suppress_default_streams: bool = False,
    level: Union[LogLevel, str, None] = None,
    formatter: Optional[LogFormatter] = None,
    streams: Optional[List[Stream]] = None,
    buffer_size: int = DEFAULT_CAPACITY,
    environment: Optional[Environment] = None,
) -> BaseLogger:
    """Build a logger from explicit arguments and the ambient environment.

    Args:
        name: Logger name. Defaults to the environment's function name.
        suppress_default_streams: Do not attach the stdout/stderr pair.
            Streams must then be supplied via ``streams`` or ``add_stream()``
            before the first log call.
        level: Threshold override. Defaults to the environment's log level,
            and to ``info`` when that is missing or unrecognised.
        formatter: Defaults to a LinearFormatter.
        streams: Extra streams, attached after the default one.
        buffer_size: Capacity of each window of the invocation buffer.
        environment: Ambient configuration. Defaults to the process
            environment.

    Returns:
        A DisabledLogger when the resolved level is ``off``, else a Logger.

    Example:
        >>> log = create_logger("checkout", level="debug")
        >>> log.debug("cart has %d items", 3)
    """
    environment = environment or default_environment()

    if isinstance(level, LogLevel):
        threshold = level
    elif level is not None:
        threshold = parse_level(level)
    else:
        threshold = parse_level(environment.log_level)

    if threshold == LogLevel.OFF:
        _log.debug("Logging is off, returning a DisabledLogger")
        return DisabledLogger()

    attached = [] if suppress_default_streams else [default_stream()]
    attached.extend(streams or [])

    return Logger(
        name if name is not None else environment.function_name,
        threshold,
        streams=attached,
        formatter=formatter,
        environment=environment,
        buffer_size=buffer_size,
    )
