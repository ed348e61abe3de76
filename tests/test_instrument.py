"""test_instrument.py - Unit tests for the @invocation decorator.

Covers:
    - The request id is taken from context.aws_request_id (object or dict)
    - context passed by keyword
    - Missing context leaves the binding unchanged
    - async handlers
    - Results and exceptions pass through unchanged
    - Default binding through the process environment
"""

import asyncio
import os
from types import SimpleNamespace

import pytest

from lambdalog import StaticEnvironment, invocation
from lambdalog.environment import INVOCATION_ID_VAR
from lambdalog.instrument import request_id_of


class TestRequestIdOf:
    def test_attribute(self):
        """The id is read from the aws_request_id attribute."""
        assert request_id_of(SimpleNamespace(aws_request_id="abc")) == "abc"

    def test_dict_key(self):
        """Dict contexts are read by key."""
        assert request_id_of({"aws_request_id": "abc"}) == "abc"

    @pytest.mark.parametrize("context", [None, object(), {}, SimpleNamespace(aws_request_id="")])
    def test_missing(self, context):
        """Absent or empty ids yield None."""
        assert request_id_of(context) is None


class TestInvocationDecorator:
    def setup_method(self):
        self.env = StaticEnvironment(invocation_id="old")

    def test_binds_request_id_before_body_runs(self):
        """The id is bound before the handler body executes."""
        seen = []

        @invocation(self.env)
        def handler(event, context):
            seen.append(self.env.invocation_id)
            return {"status": 200}

        result = handler({}, SimpleNamespace(aws_request_id="req-42"))
        assert result == {"status": 200}
        assert seen == ["req-42"]
        assert self.env.invocation_id == "req-42"

    def test_context_by_keyword(self):
        """A context passed by keyword is honoured."""
        @invocation(self.env)
        def handler(event, context=None):
            return self.env.invocation_id

        assert handler({}, context={"aws_request_id": "kw"}) == "kw"

    def test_missing_context_keeps_binding(self):
        """Without a context the previous binding stays."""
        @invocation(self.env)
        def handler(event):
            return self.env.invocation_id

        assert handler({}) == "old"

    def test_exceptions_propagate(self):
        """Handler exceptions reach the caller unchanged."""
        @invocation(self.env)
        def handler(event, context):
            raise RuntimeError("handler failed")

        with pytest.raises(RuntimeError):
            handler({}, SimpleNamespace(aws_request_id="req-1"))
        assert self.env.invocation_id == "req-1"

    def test_async_handler(self):
        """Coroutine handlers are bound before they are awaited."""
        @invocation(self.env)
        async def handler(event, context):
            await asyncio.sleep(0)
            return self.env.invocation_id

        assert asyncio.run(handler({}, SimpleNamespace(aws_request_id="async-1"))) == "async-1"

    def test_preserves_metadata(self):
        """The wrapper keeps the handler's name and docstring."""
        @invocation(self.env)
        def handler(event, context):
            """Docstring."""

        assert handler.__name__ == "handler"
        assert handler.__doc__ == "Docstring."

    def test_process_environment_by_default(self, monkeypatch):
        """Without an environment the id goes to AWS_REQUEST_ID."""
        monkeypatch.setenv(INVOCATION_ID_VAR, "before")

        @invocation()
        def handler(event, context):
            return os.environ[INVOCATION_ID_VAR]

        assert handler({}, SimpleNamespace(aws_request_id="env-1")) == "env-1"
