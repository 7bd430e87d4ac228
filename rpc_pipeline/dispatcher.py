"""Definition of the :class:`Dispatcher` class.

The dispatcher runs one :class:`~rpc_pipeline.state.RequestState` through the
request pipeline:

1. decode the body (``before_decode`` / ``after_decode`` hooks) and validate
   the envelope,
2. check authentication, then authorization,
3. offer the call to ``call_method`` hooks, falling back to the endpoint's
   method table,
4. run ``on_exception`` or ``on_result`` hooks,
5. build the response envelope,
6. serialize it unless a ``before_serialize`` hook already did,
7. run ``after_serialize`` hooks.

Any exception raised along the way is classified into the request's outcome;
:meth:`Dispatcher.process_request` never raises for a failed call.
"""

from __future__ import annotations

import inspect
import json
import logging
import time
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder

from rpc_pipeline import logs
from rpc_pipeline.classifier import ClassifiedError, classify_exception
from rpc_pipeline.config import RpcConfig, get_config
from rpc_pipeline.exceptions import JsonRpcError, JsonRpcErrorCode, RequestStateError
from rpc_pipeline.hooks import HookChain, HookStage
from rpc_pipeline.registry import EndpointRegistry, get_registry
from rpc_pipeline.signals import rpc_request_finished, rpc_stage_reached
from rpc_pipeline.state import RequestStage, RequestState
from rpc_pipeline.utils import create_json_rpc_error_response, create_json_rpc_response
from rpc_pipeline.validation import (
    decode_body,
    recover_rpc_id,
    validate_envelope,
    validate_method,
)

logger = logging.getLogger("rpc_pipeline")


class Dispatcher:
    """Runs requests through the pipeline.

    Parameters
    ----------
    registry : EndpointRegistry, optional
        Endpoints served by this dispatcher, by default the global registry.
    hooks : HookChain | list, optional
        Hooks in the order they should run.
    config : RpcConfig, optional
        Configuration, by default the one loaded from Django settings.

    Examples
    --------
    ::

        dispatcher = Dispatcher(hooks=[AuthHook(), LoggingHook()])
        state = RequestState(raw_body=body, endpoint=endpoint)
        await dispatcher.process_request(state)
        print(state.serialized_response)
    """

    def __init__(
        self,
        registry: EndpointRegistry | None = None,
        hooks: HookChain | list[Any] | None = None,
        config: RpcConfig | None = None,
    ) -> None:
        self.registry = registry if registry is not None else get_registry()
        self.hooks = hooks if isinstance(hooks, HookChain) else HookChain(hooks)
        self._config = config

    @property
    def config(self) -> RpcConfig:
        return self._config or get_config()

    def classify(
        self, exception: BaseException, state: RequestState | None = None
    ) -> ClassifiedError:
        """Classify an exception with this dispatcher's configuration."""
        return classify_exception(
            exception,
            sanitize=self.config.sanitize_errors,
            method_name=state.method_name if state is not None else None,
        )

    def preset_failure(self, state: RequestState, exception: BaseException) -> None:
        """Fail a request before it enters the pipeline.

        Used by transports when the request cannot be processed at all, e.g.
        when no endpoint matches its path. Decoding, access checks and
        dispatch are then skipped.
        """
        logger.info(logs.PRESET_FAILURE, exception)
        state.fail(self.classify(exception, state))

    async def process_request(self, state: RequestState) -> None:
        """Process a request until its response is ready.

        Parameters
        ----------
        state : RequestState
            A freshly created request.

        Raises
        ------
        RequestStateError
            If the request has already been processed.
        """
        if state.stage is not RequestStage.CREATED:
            msg = f"Request already processed (stage {state.stage.name})"
            raise RequestStateError(msg)

        start_time = time.time()

        if state.failed:
            if state.decoded_envelope is None:
                state.decoded_envelope = recover_rpc_id(state.raw_body)
        elif not state.method_invoked:
            try:
                await self._decode(state)
                self._validate(state)
                self._check_access(state)
                await self._dispatch(state)
            except Exception as e:
                self._fail(state, e)

        await self._classify(state)
        self._build_response(state)
        await self._serialize(state)

        if state.is_notification:
            logger.debug(logs.RPC_NOTIFICATION_END, state.method_name)
        else:
            logger.debug(
                logs.RPC_METHOD_CALL_END, state.rpc_id, state.method_name, state.outcome
            )

        state.advance(RequestStage.DONE)
        rpc_request_finished.send_robust(
            sender=self.__class__,
            dispatcher=self,
            state=state,
            duration=time.time() - start_time,
        )

    def _fail(self, state: RequestState, exception: BaseException) -> None:
        state.fail(self.classify(exception, state))

    async def _notify(self, stage: HookStage, state: RequestState) -> None:
        rpc_stage_reached.send(
            sender=self.__class__, dispatcher=self, state=state, stage=stage
        )
        await self.hooks.run(stage, state)

    async def _decode(self, state: RequestState) -> None:
        await self._notify(HookStage.BEFORE_DECODE, state)

        if state.decoded_envelope is None:
            state.decoded_envelope = decode_body(state.raw_body)
        logger.debug(logs.CALL_INTERCEPTED, state.decoded_envelope)
        state.advance(RequestStage.DECODED)

        await self._notify(HookStage.AFTER_DECODE, state)

    def _validate(self, state: RequestState) -> None:
        validate_envelope(state.decoded_envelope)

        if state.endpoint is None:
            raise JsonRpcError(
                JsonRpcErrorCode.METHOD_NOT_FOUND, "Unknown JSON-RPC endpoint."
            )

        if state.is_notification:
            logger.info(logs.RPC_NOTIFICATION_START, state.method_name)
        else:
            logger.info(logs.RPC_METHOD_CALL_START, state.method_name, state.rpc_id)
        if self.config.log_rpc_params:
            logger.debug("RPC params: %s", state.params)

        state.advance(RequestStage.VALIDATED)

    def _check_access(self, state: RequestState) -> None:
        if not state.is_authenticated:
            raise JsonRpcError(JsonRpcErrorCode.NOT_AUTHENTICATED, "Not authenticated.")
        if not state.is_authorized:
            raise JsonRpcError(JsonRpcErrorCode.NOT_AUTHORIZED, "Not authorized.")
        state.advance(RequestStage.AUTH_CHECKED)

    async def _dispatch(self, state: RequestState) -> None:
        validate_method(state.decoded_envelope)

        # Hooks may perform the call themselves
        await self._notify(HookStage.CALL_METHOD, state)

        if not state.method_invoked:
            method = state.endpoint.get_method(state.method_name)
            if method is None:
                raise JsonRpcError(
                    JsonRpcErrorCode.METHOD_NOT_FOUND,
                    f"Method {json.dumps(state.method_name)} not found on endpoint "
                    f"{json.dumps(state.endpoint.path)}.",
                )
            method.bind(state, state.params)

            state.method_invoked = True
            result = method(state, *state.params)
            if inspect.isawaitable(result):
                result = await result
            state.succeed(result)
        elif state.outcome is None:
            state.succeed(None)

        state.advance(RequestStage.DISPATCHED)

    async def _classify(self, state: RequestState) -> None:
        state.advance(RequestStage.CLASSIFIED)
        if state.outcome is None:
            # The method was invoked before the pipeline ran
            state.succeed(None)

        if not state.failed:
            try:
                await self._notify(HookStage.ON_RESULT, state)
            except Exception as e:
                self._fail(state, e)

        if state.failed:
            try:
                await self._notify(HookStage.ON_EXCEPTION, state)
            except Exception as e:
                self._fail(state, e)

    def _build_response(self, state: RequestState) -> None:
        error = state.error
        if error is not None:
            state.response_envelope = create_json_rpc_error_response(
                rpc_id=state.rpc_id, code=error.code, message=error.message
            )
        else:
            state.response_envelope = create_json_rpc_response(
                rpc_id=state.rpc_id, result=state.result
            )

    async def _serialize(self, state: RequestState) -> None:
        try:
            await self._notify(HookStage.BEFORE_SERIALIZE, state)
        except Exception as e:
            self._fail(state, e)
            self._build_response(state)

        # Notifications never get a body
        if state.serialized_response is None and not state.is_notification:
            state.serialized_response = self._encode(state)
        state.advance(RequestStage.SERIALIZED)

        try:
            await self._notify(HookStage.AFTER_SERIALIZE, state)
        except Exception as e:
            # The body is already final; only the outcome changes
            self._fail(state, e)

    def _encode(self, state: RequestState) -> str:
        indent = self.config.json_indent
        try:
            return json.dumps(
                state.response_envelope, cls=DjangoJSONEncoder, indent=indent
            )
        except (TypeError, ValueError) as e:
            logger.error(logs.SERIALIZATION_FAILED, state.rpc_id, e)
            state.fail(
                ClassifiedError(
                    kind=JsonRpcErrorCode.INTERNAL_ERROR,
                    message="The result could not be serialized.",
                    cause=e,
                )
            )
            self._build_response(state)
            return json.dumps(
                state.response_envelope, cls=DjangoJSONEncoder, indent=indent
            )


# Global dispatcher instance
_dispatcher: Dispatcher | None = None


def get_dispatcher() -> Dispatcher:
    """Get the global dispatcher, serving the global registry.

    Returns
    -------
    Dispatcher
        The global dispatcher instance.
    """
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = Dispatcher()
    return _dispatcher
