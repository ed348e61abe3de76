"""environment.py - Ambient configuration for loggers and invocation buffers.

A serverless runtime publishes per-process facts through environment
variables: the configured log level, the function name, and (once a handler
binds it) the id of the request currently being served. Loggers never read
``os.environ`` directly. They go through an ``Environment`` provider so tests
and embedded hosts can supply the same facts deterministically.

Variables read by ProcessEnvironment:

    LOG_LEVEL                 Threshold name (trace ... fatal, off).
    AWS_REQUEST_ID            Current invocation id. Set per request by the
                              handler, e.g. via the ``@invocation`` decorator.
    AWS_LAMBDA_FUNCTION_NAME  Default logger name.
    IS_OFFLINE                Any truthy value enables pretty-printed output
                              in JSONFormatter (local serverless-offline runs).
"""

import os
from abc import ABC, abstractmethod
from typing import Optional

LOG_LEVEL_VAR = "LOG_LEVEL"
INVOCATION_ID_VAR = "AWS_REQUEST_ID"
FUNCTION_NAME_VAR = "AWS_LAMBDA_FUNCTION_NAME"
OFFLINE_VAR = "IS_OFFLINE"

_FALSY = {"", "0", "false", "no", "off"}


class Environment(ABC):
    """Read access to the ambient facts a logger depends on.

    ``invocation_id`` is consulted on every log call, so implementations must
    return the *current* value rather than one cached at construction.
    """

    @property
    @abstractmethod
    def log_level(self) -> Optional[str]:
        """Configured threshold name, or None when unset."""

    @property
    @abstractmethod
    def invocation_id(self) -> Optional[str]:
        """Id of the invocation currently owning the process, or None."""

    @property
    @abstractmethod
    def function_name(self) -> Optional[str]:
        """Name of the deployed function, used as the default logger name."""

    @property
    @abstractmethod
    def is_offline(self) -> bool:
        """True when running locally and output should be human friendly."""

    @abstractmethod
    def set_invocation_id(self, invocation_id: Optional[str]) -> None:
        """Bind (or with None, unbind) the current invocation id."""


class ProcessEnvironment(Environment):
    """Environment backed by ``os.environ``, re-read on every access."""

    @property
    def log_level(self) -> Optional[str]:
        return os.environ.get(LOG_LEVEL_VAR)

    @property
    def invocation_id(self) -> Optional[str]:
        return os.environ.get(INVOCATION_ID_VAR) or None

    @property
    def function_name(self) -> Optional[str]:
        return os.environ.get(FUNCTION_NAME_VAR) or None

    @property
    def is_offline(self) -> bool:
        return os.environ.get(OFFLINE_VAR, "").strip().lower() not in _FALSY

    def set_invocation_id(self, invocation_id: Optional[str]) -> None:
        if invocation_id is None:
            os.environ.pop(INVOCATION_ID_VAR, None)
        else:
            os.environ[INVOCATION_ID_VAR] = invocation_id


class StaticEnvironment(Environment):
    """Environment whose values are plain attributes.

    Example:
        >>> env = StaticEnvironment(log_level="debug", invocation_id="req-1")
        >>> env.invocation_id
        'req-1'
        >>> env.set_invocation_id("req-2")
        >>> env.invocation_id
        'req-2'
    """

    def __init__(
        self,
        log_level: Optional[str] = None,
        invocation_id: Optional[str] = None,
        function_name: Optional[str] = None,
        is_offline: bool = False,
    ) -> None:
        self._log_level = log_level
        self._invocation_id = invocation_id
        self._function_name = function_name
        self._is_offline = is_offline

    @property
    def log_level(self) -> Optional[str]:
        return self._log_level

    @property
    def invocation_id(self) -> Optional[str]:
        return self._invocation_id

    @property
    def function_name(self) -> Optional[str]:
        return self._function_name

    @property
    def is_offline(self) -> bool:
        return self._is_offline

    def set_invocation_id(self, invocation_id: Optional[str]) -> None:
        self._invocation_id = invocation_id


_default_environment: Optional[Environment] = None


def default_environment() -> Environment:
    """Return the process-wide ProcessEnvironment, creating it on first use."""
    global _default_environment
    if _default_environment is None:
        _default_environment = ProcessEnvironment()
    return _default_environment
