"""instrument.py - ``@invocation`` decorator for function handlers.

Invocation history only works when the logger can tell one request from the
next. The decorator takes the request id from the runtime's context object
and binds it in the environment before the handler body runs, so every
logger (including module-level ones created during a cold start) files its
events under the right invocation.

Usage::

    from lambdalog import create_logger, invocation

    log = create_logger()

    @invocation()
    def handler(event, context):
        log.info("received %j", event)
        ...

Note:
    The id stays bound after the handler returns; the next invocation simply
    overwrites it. One invocation is assumed to own the process at a time.
"""

import inspect
from functools import wraps
from typing import Any, Callable, Optional

from .environment import Environment, default_environment

REQUEST_ID_ATTRIBUTE = "aws_request_id"


def request_id_of(context: Any) -> Optional[str]:
    """Extract the invocation id from a runtime context, or None."""
    if context is None:
        return None
    if isinstance(context, dict):
        value = context.get(REQUEST_ID_ATTRIBUTE)
    else:
        value = getattr(context, REQUEST_ID_ATTRIBUTE, None)
    return str(value) if value else None


def invocation(environment: Optional[Environment] = None) -> Callable[[Callable], Callable]:
    """Build a decorator binding each call's invocation id in ``environment``.

    Args:
        environment: Where to bind the id. Defaults to the process
            environment (``AWS_REQUEST_ID``).

    Returns:
        A decorator for ``handler(event, context, ...)`` callables, sync or
        ``async``. The wrapped handler's result and exceptions pass through
        unchanged.
    """

    def decorator(func: Callable) -> Callable:
        def bind(args: tuple, kwargs: dict) -> None:
            context = kwargs.get("context", args[1] if len(args) > 1 else None)
            request_id = request_id_of(context)
            if request_id is not None:
                (environment or default_environment()).set_invocation_id(request_id)

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                bind(args, kwargs)
                return await func(*args, **kwargs)

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            bind(args, kwargs)
            return func(*args, **kwargs)

        return wrapper

    return decorator
