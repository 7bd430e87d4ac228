"""Hook support for observing and overriding pipeline stages.

A hook is any object exposing some of the callbacks of :class:`RpcHook`. Each
callback receives the :class:`~rpc_pipeline.state.RequestState` and may be a
plain function or a coroutine function. Hooks run one at a time, in
registration order, and the pipeline awaits each before moving on.

Examples
--------
Authenticate requests from a header::

    class TokenAuthHook(RpcHook):
        async def after_decode(self, state):
            token = state.headers.get("authorization")
            state.is_authenticated = await verify_token(token)
            state.is_authorized = state.is_authenticated

Serve a method without registering it on an endpoint::

    class PingHook(RpcHook):
        def call_method(self, state):
            if state.method_name == "ping":
                state.method_invoked = True
                state.succeed("pong")

    dispatcher.hooks.add(TokenAuthHook())
    dispatcher.hooks.add(PingHook())

Notes
-----
- A hook raising at any stage aborts the remaining hooks of that stage and
  the exception becomes the request's outcome.
- ``call_method`` is offered to hooks until one of them sets
  ``state.method_invoked``; later hooks are skipped for that stage.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterator
from enum import Enum
from typing import TYPE_CHECKING, Any

from rpc_pipeline import logs

if TYPE_CHECKING:
    from rpc_pipeline.state import RequestState

logger = logging.getLogger("rpc_pipeline.hooks")


class HookStage(str, Enum):
    """Pipeline stages hooks can attach to. Values are callback names."""

    BEFORE_DECODE = "before_decode"
    AFTER_DECODE = "after_decode"
    CALL_METHOD = "call_method"
    ON_EXCEPTION = "on_exception"
    ON_RESULT = "on_result"
    BEFORE_SERIALIZE = "before_serialize"
    AFTER_SERIALIZE = "after_serialize"


class RpcHook:
    """Base class for hooks with a no-op callback for every stage.

    Subclassing is optional: the chain only calls the callbacks a hook
    actually defines.
    """

    def before_decode(self, state: RequestState) -> Any:
        """Called before the request body is decoded.

        Setting ``state.decoded_envelope`` here skips the default JSON
        decoding.
        """

    def after_decode(self, state: RequestState) -> Any:
        """Called once the body has been decoded, before validation.

        Authentication hooks typically set ``state.is_authenticated`` and
        ``state.is_authorized`` here.
        """

    def call_method(self, state: RequestState) -> Any:
        """Offered the chance to perform the call instead of the endpoint.

        To take over, set ``state.method_invoked = True`` and an outcome with
        ``state.succeed(...)`` or by raising.
        """

    def on_exception(self, state: RequestState) -> Any:
        """Called when the request failed; ``state.error`` is set."""

    def on_result(self, state: RequestState) -> Any:
        """Called when the request succeeded; ``state.result`` is set."""

    def before_serialize(self, state: RequestState) -> Any:
        """Called with ``state.response_envelope`` built.

        Setting ``state.serialized_response`` here replaces the default
        serialization.
        """

    def after_serialize(self, state: RequestState) -> Any:
        """Called last, once the response has been serialized."""


async def _call(hook: Any, stage: HookStage, state: RequestState) -> None:
    callback = getattr(hook, stage.value, None)
    if callback is None:
        return
    result = callback(state)
    if inspect.isawaitable(result):
        await result


class HookChain:
    """Ordered collection of hooks.

    Hooks are compared by identity: adding a hook twice or removing a hook
    that is not registered does nothing. Registration is not safe to run
    concurrently with itself and should happen at startup.
    """

    def __init__(self, hooks: list[Any] | None = None) -> None:
        self._hooks: list[Any] = []
        for hook in hooks or []:
            self.add(hook)

    def add(self, hook: Any) -> None:
        """Append a hook unless it is already registered."""
        if hook in self:
            return
        self._hooks.append(hook)

    def remove(self, hook: Any) -> None:
        """Remove a hook if it is registered."""
        for index, registered in enumerate(self._hooks):
            if registered is hook:
                del self._hooks[index]
                return

    def __contains__(self, hook: Any) -> bool:
        return any(registered is hook for registered in self._hooks)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._hooks))

    def __len__(self) -> int:
        return len(self._hooks)

    async def run(self, stage: HookStage, state: RequestState) -> None:
        """Run the hooks of ``stage`` in order.

        Parameters
        ----------
        stage : HookStage
            Stage to run. For :attr:`HookStage.CALL_METHOD` hooks are skipped
            once one of them has invoked the method.
        state : RequestState
            The request being processed.

        Raises
        ------
        RequestStateError
            If the hooks of ``stage`` already ran for this request.
        Exception
            Whatever a hook raised; the remaining hooks are not called.
        """
        state.mark_hook_stage(stage.value)
        for hook in self:
            if stage is HookStage.CALL_METHOD and state.method_invoked:
                break
            await _call(hook, stage, state)
            if stage is HookStage.CALL_METHOD and state.method_invoked:
                logger.debug(
                    logs.METHOD_OVERRIDDEN,
                    state.method_name,
                    hook.__class__.__name__,
                )


class LoggingHook(RpcHook):
    """Hook that logs RPC calls and their outcome.

    Examples
    --------
    Basic usage::

        dispatcher.hooks.add(LoggingHook())

    Custom logger::

        dispatcher.hooks.add(LoggingHook(logger_name="my_app.rpc"))

    Parameters
    ----------
    logger_name : str, optional
        Name of the logger to use, by default "rpc_pipeline.hooks".
    log_params : bool, optional
        Whether to log request parameters, by default False. Enable with
        caution as params may contain sensitive data.
    """

    def __init__(
        self,
        logger_name: str = "rpc_pipeline.hooks",
        *,
        log_params: bool = False,
    ):
        self.logger = logging.getLogger(logger_name)
        self.log_params = log_params

    def after_decode(self, state: RequestState) -> None:
        rpc_id = "notification" if state.is_notification else state.rpc_id
        if self.log_params:
            self.logger.info(
                "RPC call: method=%s id=%s params=%s",
                state.method_name,
                rpc_id,
                state.params,
            )
        else:
            self.logger.info("RPC call: method=%s id=%s", state.method_name, rpc_id)

    def on_result(self, state: RequestState) -> None:
        self.logger.debug("RPC result: method=%s id=%s", state.method_name, state.rpc_id)

    def on_exception(self, state: RequestState) -> None:
        error = state.error
        self.logger.info(
            "RPC error: method=%s id=%s code=%s message=%s",
            state.method_name,
            state.rpc_id,
            error.code if error else None,
            error.message if error else None,
        )
