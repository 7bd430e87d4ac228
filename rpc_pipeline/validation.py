"""Decoding and validation of request envelopes.

A request envelope is a JSON object with a ``method`` string, an optional
``id`` (absent or null for notifications) and optional positional ``params``.
Batches and named params are rejected.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from rpc_pipeline import logs
from rpc_pipeline.exceptions import JsonRpcError, JsonRpcErrorCode

logger = logging.getLogger("rpc_pipeline")


def decode_body(raw_body: bytes | str) -> Any:
    """Parse a request body as JSON.

    Parameters
    ----------
    raw_body : bytes | str
        The buffered request body.

    Returns
    -------
    Any
        The decoded JSON value.

    Raises
    ------
    JsonRpcError
        PARSE_ERROR if the body is not UTF-8 encoded JSON.
    """
    try:
        text = raw_body.decode("utf-8") if isinstance(raw_body, bytes) else raw_body
        return json.loads(text)
    except (ValueError, RecursionError) as e:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors;
        # RecursionError comes from deeply nested arrays or objects
        logger.debug("Could not decode request body: %s", e)
        raise JsonRpcError(
            JsonRpcErrorCode.PARSE_ERROR, f"Invalid JSON-RPC request body: {e}"
        ) from e


def validate_envelope(data: Any) -> dict[str, Any]:
    """Validate a decoded request and normalize its params.

    A missing ``params`` member is set to an empty list on ``data``. The
    ``method`` member is checked later by :func:`validate_method`.

    Parameters
    ----------
    data : Any
        The decoded request body.

    Returns
    -------
    dict[str, Any]
        The validated envelope (``data`` itself).

    Raises
    ------
    JsonRpcError
        INTERNAL_ERROR for batches, INVALID_PARAMS for named params and
        INVALID_REQUEST for any other malformed envelope.
    """
    if isinstance(data, list):
        raise JsonRpcError(
            JsonRpcErrorCode.INTERNAL_ERROR,
            "Batch requests are not supported by this JSON-RPC server.",
        )

    if not data:
        logger.warning(logs.EMPTY_CALL)
        raise JsonRpcError(JsonRpcErrorCode.INVALID_REQUEST)

    if not isinstance(data, dict):
        logger.warning("Invalid message type: %s", type(data).__name__)
        raise JsonRpcError(
            JsonRpcErrorCode.INVALID_REQUEST,
            f"Request must be an object, got {type(data).__name__}.",
        )

    if "jsonrpc" in data and data["jsonrpc"] != "2.0":
        logger.warning(logs.INVALID_JSON_RPC_VERSION, data["jsonrpc"])
        raise JsonRpcError(
            JsonRpcErrorCode.INVALID_REQUEST,
            f"Invalid JSON-RPC version '{data['jsonrpc']}', expected '2.0'.",
        )

    rpc_id = data.get("id")
    if rpc_id is not None and (
        isinstance(rpc_id, bool) or not isinstance(rpc_id, str | int | float)
    ):
        raise JsonRpcError(
            JsonRpcErrorCode.INVALID_REQUEST,
            f"The id must be a string, number or null, got {type(rpc_id).__name__}.",
        )

    if "params" not in data:
        data["params"] = []
    elif isinstance(data["params"], dict):
        raise JsonRpcError(
            JsonRpcErrorCode.INVALID_PARAMS,
            "Named params are not supported by this server.",
        )
    elif not isinstance(data["params"], list):
        params_type = type(data["params"]).__name__
        raise JsonRpcError(
            JsonRpcErrorCode.INVALID_REQUEST,
            "The params property has invalid data type, per JSON-RPC 2.0 "
            f"specification. Unexpected type: {params_type}.",
        )

    return data


def validate_method(data: dict[str, Any]) -> str:
    """Check the method member of a validated envelope.

    Runs after the access checks, so unauthenticated callers learn nothing
    about the request beyond its shape.

    Raises
    ------
    JsonRpcError
        INVALID_REQUEST if ``method`` is missing or not a string.
    """
    if "method" not in data:
        raise JsonRpcError(
            JsonRpcErrorCode.INVALID_REQUEST, "Missing required 'method' field."
        )
    if not isinstance(data["method"], str):
        method_type = type(data["method"]).__name__
        raise JsonRpcError(
            JsonRpcErrorCode.INVALID_REQUEST,
            f"'method' must be a string, got {method_type}.",
        )
    return data["method"]


def recover_rpc_id(raw_body: bytes | str) -> dict[str, Any] | None:
    """Best-effort extraction of the correlation id from a raw body.

    Used when a request failed before decoding, so that the error response
    can still be correlated and notifications stay body-less.

    Returns
    -------
    dict[str, Any] | None
        ``{"id": ...}`` when the body is a JSON object, else None.
    """
    if not raw_body:
        return None
    try:
        data = decode_body(raw_body)
    except JsonRpcError:
        return None
    if not isinstance(data, dict):
        return None
    rpc_id = data.get("id")
    if isinstance(rpc_id, bool) or not isinstance(rpc_id, str | int | float):
        rpc_id = None
    return {"id": rpc_id}
