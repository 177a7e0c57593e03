"""
App configuration for Entitlement Service.
"""

import logging
import os

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class EntitlementServiceConfig(AppConfig):
    """App configuration for EntitlementService."""

    name = "EntitlementService"
    verbose_name = "Entitlement Service"

    def ready(self):
        """Called when Django starts."""
        # RUN_MAIN is "false" in the autoreloader's watcher process
        if os.environ.get("RUN_MAIN") == "false":
            return

        if getattr(self, "_initialized", False):
            return

        from core.instrumentation import setup_opentelemetry

        logger.info("Setting up observability...")
        setup_opentelemetry()
        self._initialized = True
        logger.info("Observability setup complete")
