"""Definition of the :class:`Endpoint` class.

An endpoint is a path-addressable group of RPC methods. Its method table is
built once, when the endpoint is constructed, and is only read while requests
are processed.

Examples
--------
Declare methods on a subclass::

    class CalculatorEndpoint(Endpoint):
        @rpc_method()
        def add(self, state, a, b):
            return a + b

        @rpc_method("divide")
        async def div(self, state, a, b):
            return a / b

    endpoint = CalculatorEndpoint("/api/calculator")

Or add functions to a plain endpoint::

    endpoint = Endpoint("/api/echo")
    endpoint.add_method(lambda state, value: value, name="echo")

Every RPC method receives the :class:`~rpc_pipeline.state.RequestState` first,
followed by the positional params of the request.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from rpc_pipeline.exceptions import JsonRpcError, JsonRpcErrorCode

if TYPE_CHECKING:
    from rpc_pipeline.state import RequestState

logger = logging.getLogger("rpc_pipeline")

# Attribute set by @rpc_method on the functions it marks
RPC_METHOD_ATTR = "_rpc_method_name"


def normalize_path(url: str) -> str:
    """Normalize a request URL or endpoint path.

    The query string and fragment are dropped and the path always starts and
    ends with a slash, so ``"api/calc?x=1"`` becomes ``"/api/calc/"``.

    Parameters
    ----------
    url : str
        URL or path.

    Returns
    -------
    str
        Normalized path.
    """
    path = urlsplit(url.strip()).path.strip() or "/"
    if not path.startswith("/"):
        path = "/" + path
    if not path.endswith("/"):
        path += "/"
    return path


def rpc_method(method_name: str | None = None) -> Callable:
    """A decorator marking an :class:`Endpoint` method as callable over RPC.

    Parameters
    ----------
    method_name : str, optional
        RPC method name, by default the function name.

    Returns
    -------
    Callable
        Decorator returning the function unchanged apart from the marker.
    """

    def wrap(func: Callable) -> Callable:
        setattr(func, RPC_METHOD_ATTR, method_name or func.__name__)
        return func

    return wrap


@dataclass
class MethodInfo:
    """Metadata about an RPC method.

    Attributes
    ----------
    name : str
        Method name as registered.
    signature : str
        Signature as seen by clients (the request state argument excluded).
    docstring : str | None
        Method docstring if available.
    is_coroutine : bool
        Whether the method is a coroutine function.
    """

    name: str
    signature: str
    docstring: str | None
    is_coroutine: bool


@dataclass
class RpcMethod:
    """An entry of an endpoint's method table.

    Attributes
    ----------
    name : str
        Method name as exposed to clients.
    func : Callable
        Callable invoked as ``func(state, *params)``.
    """

    name: str
    func: Callable[..., Any]
    signature: inspect.Signature | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            self.signature = inspect.signature(self.func)
        except (TypeError, ValueError):
            # Some builtins have no introspectable signature
            self.signature = None

    def bind(self, state: RequestState, params: list[Any]) -> None:
        """Check that ``params`` fit the method signature.

        Raises
        ------
        JsonRpcError
            INVALID_PARAMS when the positional params do not bind.
        """
        if self.signature is None:
            return
        try:
            self.signature.bind(state, *params)
        except TypeError as e:
            raise JsonRpcError(
                JsonRpcErrorCode.INVALID_PARAMS,
                f"Invalid params for method '{self.name}': {e}",
            ) from e

    def __call__(self, state: RequestState, *params: Any) -> Any:
        return self.func(state, *params)

    @property
    def info(self) -> MethodInfo:
        signature = "(...)"
        if self.signature is not None:
            # Drop the request state argument
            parameters = list(self.signature.parameters.values())[1:]
            signature = str(self.signature.replace(parameters=parameters))
        return MethodInfo(
            name=self.name,
            signature=signature,
            docstring=inspect.getdoc(self.func),
            is_coroutine=inspect.iscoroutinefunction(self.func),
        )


class Endpoint:
    """A path and the RPC methods exposed on it.

    Parameters
    ----------
    path : str
        Path the endpoint is served at. It is normalized with
        :func:`normalize_path`.
    """

    def __init__(self, path: str) -> None:
        self.path = normalize_path(path)
        self._methods: dict[str, RpcMethod] = {}

        # Collect @rpc_method members; subclasses override their bases
        for klass in reversed(type(self).__mro__):
            for attr, value in vars(klass).items():
                name = getattr(value, RPC_METHOD_ATTR, None)
                if name is not None:
                    self._methods[name] = RpcMethod(name, getattr(self, attr))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} path={self.path!r}>"

    def add_method(self, func: Callable, name: str | None = None) -> RpcMethod:
        """Expose ``func`` on this endpoint.

        Must not be called while the endpoint serves requests.

        Parameters
        ----------
        func : Callable
            Callable invoked as ``func(state, *params)``.
        name : str, optional
            RPC method name, by default ``func.__name__``.

        Returns
        -------
        RpcMethod
            The method table entry.

        Raises
        ------
        ValueError
            If ``func`` is not callable.
        """
        if not callable(func):
            msg = f"RPC method {name or func!r} must be callable"
            raise ValueError(msg)
        method = RpcMethod(name or func.__name__, func)
        self._methods[method.name] = method
        return method

    def get_method(self, method_name: str) -> RpcMethod | None:
        """Get a method table entry by name.

        Returns
        -------
        RpcMethod | None
            The method if exposed and callable, None otherwise.
        """
        method = self._methods.get(method_name)
        if method is None or not callable(method.func):
            return None
        return method

    def has_method(self, method_name: str) -> bool:
        return self.get_method(method_name) is not None

    def list_method_names(self) -> list[str]:
        return list(self._methods)

    def get_method_info(self, method_name: str) -> MethodInfo:
        """Get detailed information about an exposed method.

        Raises
        ------
        KeyError
            If the method is not exposed.

        Examples
        --------
        >>> info = endpoint.get_method_info('add')
        >>> print(info.signature)
        (a, b)
        """
        method = self.get_method(method_name)
        if method is None:
            msg = f"Method '{method_name}' not registered"
            raise KeyError(msg)
        return method.info

    def describe_api(self) -> dict[str, Any]:
        """Generate a JSON-serializable API description.

        Returns
        -------
        dict[str, Any]
            Endpoint path and its methods.
        """
        methods_list = []
        for method_name in self.list_method_names():
            try:
                info = self.get_method_info(method_name)
            except KeyError as e:
                logger.warning("Failed to introspect method %s: %s", method_name, e)
                continue
            methods_list.append(
                {
                    "name": info.name,
                    "signature": info.signature,
                    "doc": info.docstring,
                }
            )

        return {
            "jsonrpc": "2.0",
            "endpoint": self.path,
            "methods": methods_list,
        }
