"""Canonical JSON-RPC message examples for testing."""

from __future__ import annotations

# ============================================================================
# Valid Messages
# ============================================================================

ADD_REQUEST = {
    "jsonrpc": "2.0",
    "method": "add",
    "params": [2, 3],
    "id": 1,
}

MISSING_METHOD_REQUEST = {
    "jsonrpc": "2.0",
    "method": "missing",
    "id": 2,
}

NO_PARAMS_REQUEST = {
    "jsonrpc": "2.0",
    "method": "ping",
    "id": 4,
}

NOTIFICATION = {
    "jsonrpc": "2.0",
    "method": "notify",
    "params": ["started"],
    # No id = notification
}

NULL_ID_NOTIFICATION = {
    "jsonrpc": "2.0",
    "method": "notify",
    "params": ["started"],
    "id": None,
}

WITHOUT_VERSION_REQUEST = {
    "method": "add",
    "params": [1, 1],
    "id": "abc",
}


# ============================================================================
# Invalid Messages
# ============================================================================

NAMED_PARAMS_REQUEST = {
    "jsonrpc": "2.0",
    "method": "add",
    "params": {"a": 2, "b": 3},
    "id": 3,
}

PARAMS_AS_STRING = {
    "jsonrpc": "2.0",
    "method": "add",
    "params": "not a list",
    "id": 5,
}

PARAMS_AS_NULL = {
    "jsonrpc": "2.0",
    "method": "add",
    "params": None,
    "id": 6,
}

WRONG_VERSION = {
    "jsonrpc": "1.0",
    "method": "add",
    "id": 7,
}

MISSING_METHOD_FIELD = {
    "jsonrpc": "2.0",
    "id": 8,
}

METHOD_AS_NUMBER = {
    "jsonrpc": "2.0",
    "method": 123,
    "id": 9,
}

ID_AS_OBJECT = {
    "jsonrpc": "2.0",
    "method": "add",
    "params": [1, 2],
    "id": {"nested": True},
}

BATCH = [ADD_REQUEST, NO_PARAMS_REQUEST]
