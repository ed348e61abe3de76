"""streams.py - Output destinations for rendered log text.

A sink is anything with a ``write(text)`` method: ``sys.stdout``, an
``io.StringIO``, an open file, or the FileSink below. Loggers hold a list of
Stream entries, each pairing an *output* sink (trace ... info) with an
*error* sink (warn ... fatal). Which of the two receives a given event is the
formatter's decision.

Typical usage::

    from lambdalog import create_logger
    from lambdalog.streams import FileSink, Stream

    errors = FileSink("/tmp/errors.log")
    log = create_logger("billing").add_stream(Stream("files", sys.stdout, errors))
"""

import os
import sys
from typing import Optional, Protocol


class TextSink(Protocol):
    """Structural type for every output destination."""

    def write(self, text: str) -> object: ...


class Stream:
    """A named pair of sinks for regular and error-class output.

    Attributes:
        name: Label for the pair, e.g. ``"default"``.
        output_stream: Receives events below WARN.
        error_stream: Receives WARN, ERROR and FATAL events. Defaults to
            ``output_stream`` when omitted.
    """

    __slots__ = ("name", "output_stream", "error_stream")

    def __init__(
        self,
        name: str,
        output_stream: TextSink,
        error_stream: Optional[TextSink] = None,
    ) -> None:
        self.name = name
        self.output_stream = output_stream
        self.error_stream = error_stream if error_stream is not None else output_stream

    def __repr__(self) -> str:  # pragma: no cover
        return f"Stream({self.name!r})"


def default_stream() -> Stream:
    """The stdout/stderr pair attached to every logger unless suppressed."""
    return Stream("default", sys.stdout, sys.stderr)


class FileSink:
    """Text sink that appends to a file on disk, with optional rotation.

    The file and any missing parent directories are created on first write.
    When rotation is on, a write that finds the file already at ``max_bytes``
    first moves it to ``backup_path``, so at most one generation of older
    output is kept next to the live file.
    Each ``write()`` opens, appends and closes the file, so nothing needs to
    be flushed when the process is frozen between invocations.

    Attributes:
        _path (str): Path of the log file.
        _max_bytes (int): Size at which the file is rotated. 0 disables it.
        _encoding (str): File encoding.

    Example:
        >>> sink = FileSink("./errors.log", max_bytes=5 * 1024 * 1024)
        >>> sink.write("[1700000000000 - ERROR]: boom\\n")
    """

    def __init__(self, path: str, max_bytes: int = 0, encoding: str = "utf-8") -> None:
        """Initialise the file sink.

        Args:
            path: Path to the output file.
            max_bytes: Once the file reaches this size it is renamed to
                ``<path>.bak`` (replacing any previous backup) before the next
                write. 0 (default) disables rotation.
            encoding: Character encoding for the output file.

        Raises:
            ValueError: If ``max_bytes`` is negative.
        """
        if max_bytes < 0:
            raise ValueError(f"max_bytes must be >= 0, got {max_bytes}")
        self._path = path
        self._max_bytes = max_bytes
        self._encoding = encoding

    @property
    def path(self) -> str:
        return self._path

    @property
    def backup_path(self) -> str:
        return self._path + ".bak"

    def write(self, text: str) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self._path)), exist_ok=True)
        if self._is_full():
            os.replace(self._path, self.backup_path)
        with open(self._path, "a", encoding=self._encoding) as f:
            f.write(text)

    def _is_full(self) -> bool:
        if not self._max_bytes or not os.path.exists(self._path):
            return False
        return os.path.getsize(self._path) >= self._max_bytes
