"""Tests for endpoints in rpc_pipeline.endpoint.

Coverage: normalize_path(), @rpc_method, Endpoint method table and
introspection.
"""

from __future__ import annotations

import json

import pytest

from rpc_pipeline.endpoint import Endpoint, normalize_path, rpc_method
from rpc_pipeline.exceptions import JsonRpcError, JsonRpcErrorCode
from rpc_pipeline.state import RequestState
from tests.conftest import CalculatorEndpoint


@pytest.mark.unit
class TestNormalizePath:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("", "/"),
            ("/", "/"),
            ("api", "/api/"),
            ("/api/calc", "/api/calc/"),
            ("/api/calc/", "/api/calc/"),
            ("api/calc?x=1", "/api/calc/"),
            ("http://example.com/api#top", "/api/"),
            ("  /api  ", "/api/"),
        ],
    )
    def test_normalize(self, url, expected):
        assert normalize_path(url) == expected


@pytest.mark.unit
class TestMethodTable:
    """Test how endpoints collect their methods."""

    def test_decorated_methods_exposed(self, calculator):
        names = calculator.list_method_names()

        assert {"add", "async_add", "ping", "notify", "whoami"} <= set(names)
        assert "helper" not in names
        assert "get_origin" not in names

    def test_path_normalized(self, calculator):
        assert calculator.path == "/api/calculator/"

    def test_get_method_bound(self, calculator):
        """Should call methods bound to the endpoint instance."""
        method = calculator.get_method("add")

        assert method(RequestState(), 2, 3) == 5
        assert calculator.calls == [("add", 2, 3)]

    def test_get_unknown_method(self, calculator):
        assert calculator.get_method("missing") is None
        assert not calculator.has_method("missing")

    def test_subclass_overrides(self):
        """Should prefer the most derived implementation."""

        class LoudCalculator(CalculatorEndpoint):
            @rpc_method()
            def ping(self, state):
                return "PONG"

        endpoint = LoudCalculator()

        assert endpoint.get_method("ping")(RequestState()) == "PONG"
        assert endpoint.has_method("add")

    def test_add_method(self):
        endpoint = Endpoint("/echo")

        endpoint.add_method(lambda state, value: value, name="echo")

        assert endpoint.get_method("echo")(RequestState(), "hi") == "hi"

    def test_add_method_default_name(self):
        def shout(state, text):
            return text.upper()

        endpoint = Endpoint("/echo")
        endpoint.add_method(shout)

        assert endpoint.has_method("shout")

    def test_add_not_callable(self):
        with pytest.raises(ValueError, match="must be callable"):
            Endpoint("/echo").add_method("not a function", name="bad")

    def test_repr(self, calculator):
        assert repr(calculator) == "<CalculatorEndpoint path='/api/calculator/'>"


@pytest.mark.unit
class TestBind:
    """Test parameter checks against method signatures."""

    def test_bind_matching(self, calculator):
        calculator.get_method("add").bind(RequestState(), [1, 2])

    @pytest.mark.parametrize("params", [[], [1], [1, 2, 3]])
    def test_bind_mismatch(self, calculator, params):
        with pytest.raises(JsonRpcError) as exc_info:
            calculator.get_method("add").bind(RequestState(), params)

        assert exc_info.value.code == JsonRpcErrorCode.INVALID_PARAMS

    def test_bind_varargs(self):
        endpoint = Endpoint("/sum")
        endpoint.add_method(lambda state, *values: sum(values), name="sum")

        endpoint.get_method("sum").bind(RequestState(), [1, 2, 3, 4])


@pytest.mark.unit
class TestIntrospection:
    """Test method info and API description."""

    def test_method_info(self):
        class DocumentedEndpoint(Endpoint):
            @rpc_method()
            async def multiply(self, state, a, b=2):
                """Multiply two numbers."""
                return a * b

        info = DocumentedEndpoint("/math").get_method_info("multiply")

        assert info.name == "multiply"
        assert info.signature == "(a, b=2)"
        assert info.docstring == "Multiply two numbers."
        assert info.is_coroutine is True

    def test_method_info_missing(self, calculator):
        with pytest.raises(KeyError):
            calculator.get_method_info("missing")

    def test_describe_api(self, calculator):
        description = calculator.describe_api()

        assert description["jsonrpc"] == "2.0"
        assert description["endpoint"] == "/api/calculator/"
        names = [method["name"] for method in description["methods"]]
        assert names == calculator.list_method_names()
        json.dumps(description)
