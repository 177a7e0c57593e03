"""
Development settings for EntitlementService.
"""

import os

from .base import *  # noqa: F403, F401

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0", "testserver"]

# Fall back to process-local cache when no Redis is around
if os.environ.get("CACHE_BACKEND") == "locmem":
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        }
    }

# Poll faster while iterating on checkout flows
ENTITLEMENTS = {**ENTITLEMENTS, "POLL_INTERVAL_MS": 1000}  # noqa: F405
