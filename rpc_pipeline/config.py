"""Configuration management for rpc-pipeline.

This module provides the configuration class that integrates with Django
settings, allowing runtime configuration of the transport root path, error
sanitization, parameter logging and response formatting.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings

SETTINGS_KEY = "RPC_PIPELINE"


@dataclass
class RpcConfig:
    """Main configuration for rpc-pipeline.

    Attributes
    ----------
    root_path : str
        Only request paths under this prefix are served (default: "/").
    sanitize_errors : bool
        Whether to hide the message of unclassified errors in responses.
    log_rpc_params : bool
        Whether to log RPC method parameters (may contain PII).
    json_indent : int | str | None
        Indentation used when serializing responses; None for compact output.

    Examples
    --------
    In Django settings.py::

        RPC_PIPELINE = {
            'ROOT_PATH': '/api/',
            'SANITIZE_ERRORS': False,
            'LOG_RPC_PARAMS': True,
        }
    """

    root_path: str = "/"
    sanitize_errors: bool = True
    log_rpc_params: bool = False
    json_indent: int | str | None = None

    @classmethod
    def from_settings(cls) -> RpcConfig:
        """Load configuration from Django settings.

        Falls back to default values when Django settings are not configured
        or do not define the ``RPC_PIPELINE`` key.

        Returns
        -------
        RpcConfig
            Configuration instance with values from settings or defaults.
        """
        if not settings.configured:
            return cls()

        config = getattr(settings, SETTINGS_KEY, {})

        return cls(
            root_path=config.get("ROOT_PATH", cls.root_path),
            sanitize_errors=config.get("SANITIZE_ERRORS", cls.sanitize_errors),
            log_rpc_params=config.get("LOG_RPC_PARAMS", cls.log_rpc_params),
            json_indent=config.get("JSON_INDENT", cls.json_indent),
        )


# Global configuration instance
_config: RpcConfig | None = None


def get_config() -> RpcConfig:
    """Get the global RPC configuration instance.

    On first call the configuration is loaded from Django settings. Subsequent
    calls return the cached instance.

    Returns
    -------
    RpcConfig
        The global configuration instance.

    Notes
    -----
    Changes to Django settings after the first call are not reflected unless
    :func:`reset_config` is called.
    """
    global _config
    if _config is None:
        _config = RpcConfig.from_settings()
    return _config


def reset_config() -> None:
    """Reset the global configuration cache.

    Primarily useful in tests that override settings.
    """
    global _config
    _config = None
