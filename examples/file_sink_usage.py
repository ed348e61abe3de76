"""examples/file_sink_usage.py - Send errors to a rotating file, the rest to stdout.

Run:
    python examples/file_sink_usage.py
    cat /tmp/lambdalog-demo/errors.log
"""

import sys

from lambdalog import FileSink, Stream, StaticEnvironment, create_logger

if __name__ == "__main__":
    errors = FileSink("/tmp/lambdalog-demo/errors.log", max_bytes=1024 * 1024)
    log = create_logger(
        "file-demo",
        suppress_default_streams=True,
        streams=[Stream("files", sys.stdout, errors)],
        environment=StaticEnvironment(invocation_id="req-file"),
        level="debug",
    )

    for i in range(8):
        log.debug("processing record %d", i)
    log.error("record %d is malformed", 8)

    print(f"error with history appended to {errors.path}")
