"""Exceptions for the rpc-pipeline package."""

from __future__ import annotations

import json
from enum import IntEnum


class JsonRpcErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes understood by the pipeline.

    Standard error codes are defined by the JSON-RPC 2.0 specification.
    Server-defined error codes are in the range -32099 to -32000.

    Standard Attributes
    -------------------
    PARSE_ERROR : int
        Invalid JSON was received (-32700).
    INVALID_REQUEST : int
        The JSON sent is not a valid Request object (-32600).
    METHOD_NOT_FOUND : int
        The endpoint or method does not exist / is not available (-32601).
    INVALID_PARAMS : int
        Invalid method parameter(s) (-32602).
    INTERNAL_ERROR : int
        Internal JSON-RPC error (-32603).

    Server-Defined Attributes
    -------------------------
    NOT_AUTHENTICATED : int
        The caller was not authenticated (-32000).
    NOT_AUTHORIZED : int
        The caller is authenticated but not allowed to make the call (-32001).
    """

    # Standard JSON-RPC 2.0 error codes
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server-defined error codes
    NOT_AUTHENTICATED = -32000
    NOT_AUTHORIZED = -32001


RPC_ERRORS: dict[int, str] = {
    JsonRpcErrorCode.PARSE_ERROR: "Parse Error",
    JsonRpcErrorCode.INVALID_REQUEST: "Invalid Request",
    JsonRpcErrorCode.METHOD_NOT_FOUND: "Method Not Found",
    JsonRpcErrorCode.INVALID_PARAMS: "Invalid Params",
    JsonRpcErrorCode.INTERNAL_ERROR: "Internal Error",
    JsonRpcErrorCode.NOT_AUTHENTICATED: "Not Authenticated",
    JsonRpcErrorCode.NOT_AUTHORIZED: "Not Authorized",
}


class JsonRpcError(Exception):
    """Protocol-level failure carrying a JSON-RPC error code.

    Raise it from pipeline stages, hooks or RPC methods to control the code
    and message the client receives. Anything else raised during a request is
    classified as :attr:`JsonRpcErrorCode.INTERNAL_ERROR`.
    """

    def __init__(self, code: int, message: str | None = None):
        """Initialize a new :class:`JsonRpcError` instance.

        Parameters
        ----------
        code : int
            RPC error code.
        message : str, optional
            Human readable message. Defaults to the canonical message of
            ``code``.
        """
        self.code = code
        self.message = message or RPC_ERRORS.get(
            code, RPC_ERRORS[JsonRpcErrorCode.INTERNAL_ERROR]
        )
        super().__init__(self.message)

    def as_dict(self) -> dict[str, int | str]:
        """Return the protocol error object.

        Returns
        -------
        dict[str, int | str]
            ``{"code": ..., "message": ...}``.
        """
        return {"code": int(self.code), "message": self.message}

    def __str__(self) -> str:
        return json.dumps(self.as_dict())


class RequestStateError(RuntimeError):
    """Raised when a request state is used outside of its lifecycle rules."""
