"""Shared test fixtures for rpc-pipeline test suite."""

from __future__ import annotations

import datetime
import json
import os

# Configure Django settings before any Django imports
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tests.settings")

import django

django.setup()

import pytest

from rpc_pipeline.config import RpcConfig, reset_config
from rpc_pipeline.dispatcher import Dispatcher
from rpc_pipeline.endpoint import Endpoint, rpc_method
from rpc_pipeline.exceptions import JsonRpcError, JsonRpcErrorCode
from rpc_pipeline.hooks import HookStage, RpcHook
from rpc_pipeline.registry import EndpointRegistry
from rpc_pipeline.state import RequestState

# ============================================================================
# Endpoints
# ============================================================================


class CalculatorEndpoint(Endpoint):
    """Endpoint exposing a handful of test methods."""

    def __init__(self, path: str = "/api/calculator") -> None:
        super().__init__(path)
        self.events: list = []
        self.calls: list = []

    @rpc_method()
    def add(self, state, a, b):
        self.calls.append(("add", a, b))
        return a + b

    @rpc_method()
    async def async_add(self, state, a, b):
        self.calls.append(("async_add", a, b))
        return a + b

    @rpc_method()
    def ping(self, state):
        return "pong"

    @rpc_method()
    def fail(self, state):
        raise RuntimeError("boom")

    @rpc_method()
    def reject(self, state, value):
        raise JsonRpcError(JsonRpcErrorCode.INVALID_PARAMS, f"Bad value: {value}.")

    @rpc_method()
    def notify(self, state, event):
        self.events.append(event)

    @rpc_method()
    def today(self, state):
        return datetime.date(2024, 1, 2)

    @rpc_method()
    def not_serializable(self, state):
        return object()

    @rpc_method("whoami")
    def get_origin(self, state):
        return state.remote_origin

    def helper(self):
        """Not exposed over RPC."""
        return "hidden"


# ============================================================================
# Hooks
# ============================================================================


class AllowAllHook(RpcHook):
    """Authenticates and authorizes every request."""

    def after_decode(self, state):
        state.is_authenticated = True
        state.is_authorized = True


class AuthenticateOnlyHook(RpcHook):
    """Authenticates every request but authorizes none."""

    def after_decode(self, state):
        state.is_authenticated = True


class RecordingHook:
    """Duck-typed hook recording every callback into a shared log."""

    def __init__(self, name: str, log: list) -> None:
        self.name = name
        self.log = log

    def _record(self, stage: HookStage) -> None:
        self.log.append((self.name, stage.value))

    def before_decode(self, state):
        self._record(HookStage.BEFORE_DECODE)

    def after_decode(self, state):
        self._record(HookStage.AFTER_DECODE)

    def call_method(self, state):
        self._record(HookStage.CALL_METHOD)

    def on_exception(self, state):
        self._record(HookStage.ON_EXCEPTION)

    def on_result(self, state):
        self._record(HookStage.ON_RESULT)

    def before_serialize(self, state):
        self._record(HookStage.BEFORE_SERIALIZE)

    def after_serialize(self, state):
        self._record(HookStage.AFTER_SERIALIZE)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_config():
    """Reload configuration from settings for every test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def calculator():
    """A fresh calculator endpoint."""
    return CalculatorEndpoint()


@pytest.fixture
def registry(calculator):
    """Registry serving the calculator endpoint."""
    registry = EndpointRegistry()
    registry.register_endpoint(calculator)
    return registry


@pytest.fixture
def config():
    """Default configuration."""
    return RpcConfig()


@pytest.fixture
def dispatcher(registry, config):
    """Dispatcher letting every request through access checks."""
    return Dispatcher(registry=registry, hooks=[AllowAllHook()], config=config)


@pytest.fixture
def hook_log():
    return []


@pytest.fixture
def make_state(calculator):
    """Factory building request states for the calculator endpoint."""

    def _make_state(body, endpoint=calculator, **kwargs):
        if not isinstance(body, bytes | str):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        return RequestState(raw_body=body, endpoint=endpoint, **kwargs)

    return _make_state
