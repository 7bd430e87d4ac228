"""HTTP transport for the RPC pipeline built on Django Channels.

Route the consumer in your ASGI application::

    from django.urls import re_path
    from rpc_pipeline.consumers import AsyncRpcHttpConsumer

    urlpatterns = [
        re_path(r"^api/", AsyncRpcHttpConsumer.as_asgi()),
    ]

Endpoints are looked up by request path in the dispatcher's registry.
"""

from __future__ import annotations

import logging
from typing import Any

from channels.generic.http import AsyncHttpConsumer

from rpc_pipeline.dispatcher import Dispatcher, get_dispatcher
from rpc_pipeline.endpoint import normalize_path
from rpc_pipeline.exceptions import JsonRpcError, JsonRpcErrorCode
from rpc_pipeline.state import RequestState

logger = logging.getLogger("rpc_pipeline")

HTTP_OK = 200
HTTP_NO_CONTENT = 204
HTTP_INTERNAL_SERVER_ERROR = 500


class AsyncRpcHttpConsumer(AsyncHttpConsumer):
    """Serve JSON-RPC requests over HTTP POST.

    Attributes
    ----------
    dispatcher : Dispatcher | None
        Dispatcher processing the requests. The global dispatcher is used
        when not set.

    Notes
    -----
    Status codes:

    - 200 with the response body for successful calls,
    - 204 without body for successful notifications,
    - 500 for failed calls, with the error body unless the call was a
      notification or failed after its success body was serialized.
    """

    dispatcher: Dispatcher | None = None

    def get_dispatcher(self) -> Dispatcher:
        return self.dispatcher or get_dispatcher()

    async def handle(self, body: bytes) -> None:
        """Called on HTTP request with the fully buffered body."""
        dispatcher = self.get_dispatcher()
        state = self.build_request_state(body, dispatcher)

        await dispatcher.process_request(state)

        status_code = self.get_status_code(state)
        if (
            state.is_notification
            or not state.serialized_response
            or self.body_contradicts_outcome(state)
        ):
            await self.send_response(status_code, b"")
            return

        await self.send_response(
            status_code,
            state.serialized_response.encode("utf-8"),
            headers=[
                (b"Content-Type", b"application/json"),
            ],
        )

    def build_request_state(self, body: bytes, dispatcher: Dispatcher) -> RequestState:
        """Create the request state from the ASGI scope and body.

        Requests that cannot be processed (not a POST, unknown path) get a
        preset failure.
        """
        http_method = self.scope.get("method", "")
        path = normalize_path(self.scope.get("path", "/"))
        client = self.scope.get("client")

        state = RequestState(
            raw_body=body,
            headers=self.get_headers(),
            remote_origin=client[0] if client else None,
        )

        if http_method != "POST":
            dispatcher.preset_failure(
                state,
                JsonRpcError(
                    JsonRpcErrorCode.INTERNAL_ERROR,
                    f"JSON-RPC does not handle HTTP {http_method} requests.",
                ),
            )
            return state

        endpoint = None
        if path.startswith(normalize_path(dispatcher.config.root_path)):
            endpoint = dispatcher.registry.get(path)
        if endpoint is None:
            dispatcher.preset_failure(
                state,
                JsonRpcError(
                    JsonRpcErrorCode.METHOD_NOT_FOUND,
                    f"Unknown JSON-RPC endpoint {path}.",
                ),
            )
            return state

        state.endpoint = endpoint
        return state

    def get_headers(self) -> dict[str, str]:
        """Request headers from the scope, with lowercase names."""
        headers: dict[str, str] = {}
        for name, value in self.scope.get("headers", []):
            headers[name.decode("latin1").lower()] = value.decode("latin1")
        return headers

    @staticmethod
    def body_contradicts_outcome(state: RequestState) -> bool:
        """True when a request failed after a success body was serialized.

        This happens when an ``after_serialize`` hook raises. The response
        is then sent as a 500 without body.
        """
        envelope = state.response_envelope or {}
        return state.failed and "error" not in envelope

    @staticmethod
    def get_status_code(state: RequestState) -> int:
        if state.failed:
            return HTTP_INTERNAL_SERVER_ERROR
        if state.is_notification:
            return HTTP_NO_CONTENT
        return HTTP_OK

    async def send_response(
        self, status: int, body: bytes, **kwargs: Any
    ) -> None:
        logger.debug("Sending HTTP %s response (%d bytes)", status, len(body))
        await super().send_response(status, body, **kwargs)
