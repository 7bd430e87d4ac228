"""JSON-RPC request pipeline for Django Channels.

This package processes JSON-RPC 2.0 style requests through a fixed pipeline
(decode, validate, authenticate, authorize, dispatch, serialize) that hooks
can observe or override at every stage.

Public API
----------
Pipeline:
    - Dispatcher: Runs a request through the pipeline
    - RequestState: Per-request state shared by stages and hooks
    - RequestStage: Lifecycle stages of a request

Endpoints:
    - Endpoint: A path and the RPC methods exposed on it
    - rpc_method: Decorator exposing an endpoint method
    - EndpointRegistry: Endpoints by path

Hooks:
    - RpcHook: Base class for hooks
    - HookChain: Ordered hook collection
    - HookStage: Stages hooks attach to
    - LoggingHook: Hook logging RPC calls

Transport:
    - AsyncRpcHttpConsumer: Channels HTTP consumer

Errors:
    - JsonRpcError: Protocol error exception
    - JsonRpcErrorCode: Enum of error codes
    - ClassifiedError, Success, Failure: Request outcomes

Configuration:
    Configure behavior via Django settings::

        RPC_PIPELINE = {
            'ROOT_PATH': '/api/',
            'SANITIZE_ERRORS': True,
            'LOG_RPC_PARAMS': False,
        }
"""

from rpc_pipeline.classifier import ClassifiedError, Failure, Success
from rpc_pipeline.consumers import AsyncRpcHttpConsumer
from rpc_pipeline.dispatcher import Dispatcher, get_dispatcher
from rpc_pipeline.endpoint import Endpoint, rpc_method
from rpc_pipeline.exceptions import JsonRpcError, JsonRpcErrorCode, RequestStateError
from rpc_pipeline.hooks import HookChain, HookStage, LoggingHook, RpcHook
from rpc_pipeline.registry import EndpointRegistry, get_registry
from rpc_pipeline.state import RequestStage, RequestState

__all__ = [
    "AsyncRpcHttpConsumer",
    "ClassifiedError",
    "Dispatcher",
    "Endpoint",
    "EndpointRegistry",
    "Failure",
    "HookChain",
    "HookStage",
    "JsonRpcError",
    "JsonRpcErrorCode",
    "LoggingHook",
    "RequestStage",
    "RequestState",
    "RequestStateError",
    "RpcHook",
    "Success",
    "get_dispatcher",
    "get_registry",
    "rpc_method",
]
