"""Django application configuration for rpc-pipeline."""

from __future__ import annotations

import logging

from django.apps import AppConfig

logger = logging.getLogger("rpc_pipeline")


class RpcPipelineConfig(AppConfig):
    """Django app configuration for rpc-pipeline.

    Examples
    --------
    Add to INSTALLED_APPS in settings.py::

        INSTALLED_APPS = [
            ...
            'rpc_pipeline',
            ...
        ]
    """

    name = "rpc_pipeline"
    verbose_name = "JSON-RPC Pipeline"

    def ready(self) -> None:
        """Load the configuration when Django starts.

        Notes
        -----
        This method should not perform any database operations or import
        models, as it runs before Django is fully initialized.
        """
        from rpc_pipeline.config import get_config

        # Load configuration early to catch any issues
        config = get_config()

        logger.info(
            "rpc-pipeline initialized: ROOT_PATH=%s, SANITIZE_ERRORS=%s",
            config.root_path,
            config.sanitize_errors,
        )

        if config.log_rpc_params:
            logger.warning(
                "LOG_RPC_PARAMS is enabled - RPC parameters will be logged. "
                "This may expose sensitive information (PII, credentials). "
                "Only enable in development environments."
            )
