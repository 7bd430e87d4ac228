"""Tests for message builders in rpc_pipeline.utils."""

from __future__ import annotations

import pytest

from rpc_pipeline.utils import (
    create_json_rpc_error_response,
    create_json_rpc_request,
    create_json_rpc_response,
)


@pytest.mark.unit
class TestCreateJsonRpcRequest:
    def test_request(self):
        assert create_json_rpc_request(1, "add", [1, 2]) == {
            "jsonrpc": "2.0",
            "method": "add",
            "id": 1,
            "params": [1, 2],
        }

    def test_notification(self):
        """Should omit the id for notifications."""
        message = create_json_rpc_request(method="notify")

        assert "id" not in message
        assert "params" not in message


@pytest.mark.unit
class TestCreateJsonRpcResponse:
    def test_result(self):
        assert create_json_rpc_response(1, result=5) == {
            "jsonrpc": "2.0",
            "id": 1,
            "result": 5,
        }

    def test_null_result(self):
        """Should always include the result member on success."""
        assert create_json_rpc_response("a")["result"] is None

    def test_error_excludes_result(self):
        message = create_json_rpc_response(1, error={"code": -1, "message": "x"})

        assert "result" not in message
        assert message["error"] == {"code": -1, "message": "x"}

    @pytest.mark.parametrize("rpc_id", [None, 0, "id", 1.5])
    def test_error_response(self, rpc_id):
        message = create_json_rpc_error_response(rpc_id, -32601, "Method Not Found")

        assert message == {
            "jsonrpc": "2.0",
            "id": rpc_id,
            "error": {"code": -32601, "message": "Method Not Found"},
        }
