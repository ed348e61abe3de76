"""errors.py - Exception hierarchy for lambdalog.

Only configuration defects surface as exceptions. Rendering problems are
absorbed by the formatters, and buffer / property operations are total.
"""


class LambdaLogError(Exception):
    """Base class for every exception raised by lambdalog."""


class ConfigurationError(LambdaLogError):
    """Raised when a logger is used in a state that cannot deliver output.

    The typical cause is a logger built with ``suppress_default_streams=True``
    that never had a stream attached via ``add_stream()``.
    """
