"""
Test settings for EntitlementService.
"""

from .base import *  # noqa: F403, F401

DEBUG = False

# Use in-memory cache for tests
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# Keep polling tests fast
ENTITLEMENTS = {
    **ENTITLEMENTS,  # noqa: F405
    "POLL_INTERVAL_MS": 1,
    "REMOTE_SYNC": {
        "BASE_URL": "http://billing.test/api",
        "API_TOKEN": "test-token",
        "TIMEOUT_SECONDS": 1,
    },
}

OTEL_EXPORTER_OTLP_ENDPOINT = ""

# Disable logging during tests
LOGGING_CONFIG = None
