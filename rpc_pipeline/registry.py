"""Endpoint registry mapping request paths to endpoints."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from rpc_pipeline.endpoint import normalize_path

if TYPE_CHECKING:
    from rpc_pipeline.endpoint import Endpoint


class EndpointRegistry:
    """Registry of endpoints by normalized path.

    Registration is not safe to run concurrently with itself. Register and
    unregister endpoints during startup or shutdown; request processing only
    reads the registry.

    Attributes
    ----------
    _endpoints : dict[str, Endpoint]
        Mapping of normalized paths to endpoints.
    """

    def __init__(self) -> None:
        """Initialize the registry."""
        self._endpoints: dict[str, Endpoint] = {}

    def register(self, path: str, endpoint: Endpoint) -> None:
        """Register an endpoint at a path.

        Registering the same endpoint at the same path again is a no-op.

        Parameters
        ----------
        path : str
            Path to serve the endpoint at.
        endpoint : Endpoint
            The endpoint.

        Raises
        ------
        ValueError
            If another endpoint is already registered at the path.
        """
        path = normalize_path(path)
        registered = self._endpoints.get(path)
        if registered is None:
            self._endpoints[path] = endpoint
        elif registered is not endpoint:
            msg = f"Another JSON-RPC endpoint is registered at the same path: {path}"
            raise ValueError(msg)

    def register_endpoint(self, endpoint: Endpoint) -> None:
        """Register an endpoint at its own path."""
        self.register(endpoint.path, endpoint)

    def unregister(self, path: str) -> bool:
        """Remove the endpoint registered at a path.

        Returns
        -------
        bool
            True if an endpoint was found and removed.
        """
        return self._endpoints.pop(normalize_path(path), None) is not None

    def get(self, path: str) -> Endpoint | None:
        """Get the endpoint registered at a path, or None."""
        return self._endpoints.get(normalize_path(path))

    @property
    def endpoints(self) -> Mapping[str, Endpoint]:
        """Read-only view of the registered endpoints."""
        return MappingProxyType(self._endpoints)

    def __contains__(self, path: str) -> bool:
        return normalize_path(path) in self._endpoints

    def __len__(self) -> int:
        return len(self._endpoints)


# Global registry instance
_registry = EndpointRegistry()


def get_registry() -> EndpointRegistry:
    """Get the global endpoint registry.

    Returns
    -------
    EndpointRegistry
        The global registry instance.
    """
    return _registry
