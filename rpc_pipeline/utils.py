from __future__ import annotations

from typing import Any


def create_json_rpc_request(
    rpc_id: str | int | None = None,
    method: str | None = None,
    params: list[Any] | None = None,
) -> dict[str, Any]:
    """Create a JSON-RPC 2.0 request message.

    Parameters
    ----------
    rpc_id : str | int | None
        Request identifier. If None, creates a notification.
    method : str | None
        Method name to call.
    params : list[Any] | None
        Positional parameters to pass to the method.

    Returns
    -------
    dict[str, Any]
        JSON-RPC 2.0 request message.
    """
    message: dict[str, Any] = {
        "jsonrpc": "2.0",
        "method": method,
    }

    if rpc_id is not None:
        message["id"] = rpc_id

    if params is not None:
        message["params"] = params

    return message


def create_json_rpc_response(
    rpc_id: str | int | float | None = None,
    result: Any = None,
    error: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create a JSON-RPC 2.0 response message.

    Parameters
    ----------
    rpc_id : str | int | float | None
        Request identifier that this responds to.
    result : Any
        Successful result data.
    error : dict[str, Any] | None
        Error information if the request failed.

    Returns
    -------
    dict[str, Any]
        JSON-RPC 2.0 response message.
    """
    message: dict[str, Any] = {
        "jsonrpc": "2.0",
        "id": rpc_id,
    }

    if error is not None:
        message["error"] = error
    else:
        message["result"] = result

    return message


def create_json_rpc_error_response(
    rpc_id: str | int | float | None = None,
    code: int = -32603,
    message: str = "Internal Error",
) -> dict[str, Any]:
    """Create a JSON-RPC 2.0 error response.

    Parameters
    ----------
    rpc_id : str | int | float | None
        Request identifier that this responds to.
    code : int
        Error code.
    message : str
        Error message.

    Returns
    -------
    dict[str, Any]
        JSON-RPC 2.0 error response message.
    """
    error_obj = {
        "code": code,
        "message": message,
    }

    return create_json_rpc_response(rpc_id=rpc_id, error=error_obj)
