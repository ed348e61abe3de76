"""test_formatters.py - Unit tests for LogFormatter, LinearFormatter and JSONFormatter.

Covers:
    - Routing: warn and above go to the error sink, the rest to output
    - Every configured stream receives the rendering
    - LinearFormatter line layout, history block and elision line
    - JSONFormatter keys, message hash, properties, history, pretty toggle
    - Totality: a failing render becomes a placeholder line
"""

import io
import json

from lambdalog.buffer import BufferSnapshot
from lambdalog.environment import StaticEnvironment
from lambdalog.event import EventMessage, LogEvent
from lambdalog.formatters import JSONFormatter, LinearFormatter, LogFormatter, message_hash
from lambdalog.levels import LogLevel
from lambdalog.streams import Stream


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _event(message="hello %s", args=("world",), level=LogLevel.INFO, **fields) -> LogEvent:
    defaults = dict(
        logger_name="svc",
        timestamp=1700000000000,
        level=level,
        message=EventMessage(message, tuple(args)),
        properties={},
    )
    defaults.update(fields)
    return LogEvent(**defaults)


def _stored(n: int) -> LogEvent:
    return _event(f"step {n}", (), sequence_number=n, invocation_id="req-1")


def _split_stream():
    out, err = io.StringIO(), io.StringIO()
    return Stream("split", out, err), out, err


class _Exploding(LogFormatter):
    def render(self, event):
        raise RuntimeError("kaboom")


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


class TestRouting:
    def test_info_goes_to_output_sink(self):
        """Info events are written to the output sink only."""
        stream, out, err = _split_stream()
        LinearFormatter().format(_event(), [stream])
        assert out.getvalue() != ""
        assert err.getvalue() == ""

    def test_warn_goes_to_error_sink(self):
        """Warn events are written to the error sink only."""
        stream, out, err = _split_stream()
        LinearFormatter().format(_event(level=LogLevel.WARN), [stream])
        assert out.getvalue() == ""
        assert "WARN" in err.getvalue()

    def test_every_stream_receives_output(self):
        """Each stream gets the same rendering."""
        first, out1, _ = _split_stream()
        second, out2, _ = _split_stream()
        LinearFormatter().format(_event(), [first, second])
        assert out1.getvalue() == out2.getvalue() != ""

    def test_error_sink_defaults_to_output_sink(self):
        """A stream without an error sink takes errors on its output."""
        sink = io.StringIO()
        LinearFormatter().format(_event(level=LogLevel.FATAL), [Stream("one", sink)])
        assert "FATAL" in sink.getvalue()


# ---------------------------------------------------------------------------
# LinearFormatter
# ---------------------------------------------------------------------------


class TestLinearFormatter:
    def test_single_line_layout(self):
        """An info event renders as one timestamped line."""
        assert LinearFormatter().render(_event()) == "[1700000000000 - INFO]: hello world\n"

    def test_history_block_for_errors(self):
        """Errors are followed by the numbered invocation history."""
        snapshot = BufferSnapshot((_stored(1), _stored(2)), (), 5)
        text = LinearFormatter().render(
            _event("boom", (), level=LogLevel.ERROR, buffer=snapshot, sequence_number=3)
        )
        lines = text.splitlines()
        assert lines[0] == "[1700000000000 - ERROR]: boom"
        assert lines[1] == (
            "\tERROR: Printing the first and last 5 log messages "
            "to aid in issue reproduction:"
        )
        assert lines[2:] == ["\tLOG #1: [INFO]: step 1", "\tLOG #2: [INFO]: step 2"]

    def test_elision_line_between_windows(self):
        """A gap between the windows is summarised in one line."""
        snapshot = BufferSnapshot((_stored(1), _stored(2)), (_stored(6), _stored(7)), 2)
        text = LinearFormatter().render(
            _event("boom", (), level=LogLevel.WARN, buffer=snapshot, sequence_number=8)
        )
        lines = text.splitlines()
        assert lines[4] == "\t[... 3 more messages ...]"
        assert lines[-1] == "\tLOG #7: [INFO]: step 7"

    def test_no_elision_when_windows_are_contiguous(self):
        """Adjacent windows print without an elision line."""
        snapshot = BufferSnapshot((_stored(1), _stored(2)), (_stored(3), _stored(4)), 2)
        text = LinearFormatter().render(
            _event("boom", (), level=LogLevel.WARN, buffer=snapshot, sequence_number=5)
        )
        assert "more messages" not in text


# ---------------------------------------------------------------------------
# JSONFormatter
# ---------------------------------------------------------------------------


class TestJSONFormatter:
    def setup_method(self):
        self.env = StaticEnvironment()
        self.formatter = JSONFormatter(environment=self.env)

    def test_core_keys(self):
        """Timestamp, level, name, message and hash are always present."""
        data = json.loads(self.formatter.render(_event()))
        assert data["Timestamp"] == 1700000000000
        assert data["Level"] == "INFO"
        assert data["Name"] == "svc"
        assert data["Message"] == "hello world"
        assert data["MessageHash"] == message_hash("hello %s")

    def test_message_hash_is_eight_upper_hex_chars(self):
        """The message hash is eight upper-case hex digits."""
        digest = message_hash("hello %s")
        assert len(digest) == 8
        assert digest == digest.upper()
        int(digest, 16)

    def test_no_hash_for_structured_messages(self):
        """Mapping messages carry no MessageHash."""
        data = json.loads(self.formatter.render(_event({"order": 1}, ())))
        assert "MessageHash" not in data

    def test_request_id_and_count_inside_an_invocation(self):
        """RequestId and LogCount appear inside an invocation."""
        data = json.loads(self.formatter.render(_event(invocation_id="req-1", sequence_number=4)))
        assert data["RequestId"] == "req-1"
        assert data["LogCount"] == 4

    def test_properties_become_root_keys(self):
        """Logger properties are merged into the top-level object."""
        data = json.loads(
            self.formatter.render(_event(properties={"user": "u1", "cart": {"items": 2}}))
        )
        assert data["user"] == "u1"
        assert data["cart"] == {"items": 2}

    def test_previous_logs_for_warnings(self):
        """Warnings list the history under PreviousLogs."""
        snapshot = BufferSnapshot((_stored(1),), (_stored(7),), 5)
        data = json.loads(
            self.formatter.render(_event("bad", (), level=LogLevel.WARN, buffer=snapshot))
        )
        assert data["PreviousLogs"] == ["LOG #1: [INFO]: step 1", "LOG #7: [INFO]: step 7"]

    def test_compact_by_default_and_pretty_offline(self):
        """Output is compact online and indented offline."""
        assert "\n" not in self.formatter.render(_event()).rstrip("\n")
        self.env._is_offline = True
        assert '\n  "Level"' in self.formatter.render(_event())

    def test_explicit_pretty_overrides_environment(self):
        """pretty=True wins over the offline flag."""
        formatter = JSONFormatter(pretty=True, environment=StaticEnvironment(is_offline=False))
        assert "\n" in formatter.render(_event()).rstrip("\n")

    def test_non_json_values_fall_back_to_str(self):
        """Values json cannot encode are written via str()."""
        class Token:
            def __str__(self):
                return "token"

        data = json.loads(self.formatter.render(_event(properties={"t": Token()})))
        assert data["t"] == "token"


# ---------------------------------------------------------------------------
# Totality
# ---------------------------------------------------------------------------


class TestTotality:
    def test_failing_render_writes_placeholder(self):
        """A render error becomes a placeholder line."""
        sink = io.StringIO()
        _Exploding().format(_event(), [Stream("s", sink)])
        assert sink.getvalue() == "<unrenderable event: RuntimeError: kaboom>\n"

    def test_circular_property_renders_placeholder(self):
        """A circular property yields a placeholder, not an exception."""
        cycle = {}
        cycle["self"] = cycle
        sink = io.StringIO()
        JSONFormatter(environment=StaticEnvironment()).format(
            _event(properties={"cycle": cycle}), [Stream("s", sink)]
        )
        assert sink.getvalue().startswith("<unrenderable event: ValueError")
