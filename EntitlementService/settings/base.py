"""
Base Django settings for EntitlementService.

These settings are shared across all environments.
Environment-specific overrides are in dev.py, test.py, and prod.py
"""
import os
from pathlib import Path

from .logging import get_logging_config

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = "django-insecure-8q#n2v(x3o!entitlements-local-only)k1@w7z0p^d4r$e9m"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# Application definition
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    # Third party
    "rest_framework",
    "drf_spectacular",
    # Local apps
    "EntitlementService.apps.EntitlementServiceConfig",
    "core",
    "subscriptions",
    "seats",
    "activations",
    "api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    # Custom middleware
    "core.middleware.observability.ObservabilityMiddleware",
    "core.middleware.metrics.MetricsMiddleware",
    "core.middleware.acting_user.ActingUserMiddleware",
]

ROOT_URLCONF = "EntitlementService.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

# Subscription records live in the billing backend; this service keeps no
# relational state of its own.
DATABASES = {}

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# REST Framework
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "api.exceptions.custom_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

# drf-spectacular settings
SPECTACULAR_SETTINGS = {
    "TITLE": "Entitlement Service API",
    "DESCRIPTION": (
        "Subscription entitlement and seat management API. "
        "Provides access decisions, seat allocation and "
        "post-payment activation tracking per company."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "COMPONENT_SPLIT_REQUEST": True,
    "SCHEMA_PATH_PREFIX": "/api/v1",
    "TAGS": [
        {"name": "Entitlements", "description": "Access decisions and snapshots"},
        {"name": "Seats", "description": "Seat allocation for company members"},
        {"name": "Payments", "description": "Post-payment activation tracking"},
        {"name": "Health", "description": "Health check endpoints"},
    ],
}

# Redis Cache
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": os.environ.get("REDIS_URL", "redis://127.0.0.1:6379/1"),
        "OPTIONS": {
            "socket_connect_timeout": 5,
            "socket_timeout": 5,
        },
    }
}

# Acting user headers
USER_ID_HEADER = "X-User-ID"
USER_ROLE_HEADER = "X-User-Role"
COMPANY_ADMIN_HEADER = "X-Company-Admin"

# Entitlements
ENTITLEMENTS = {
    "POLL_INTERVAL_MS": 3000,
    "POLL_MAX_ATTEMPTS": 10,
    "GRACE_PERIOD_DAYS": 7,
    "FREE_CHECKOUT_SKIPS_CONFIRMATION": False,
    "SNAPSHOT_CACHE_TTL": 60 * 60 * 24,
    "REMOTE_SYNC": {
        "BASE_URL": os.environ.get("ENTITLEMENTS_REMOTE_URL", "http://127.0.0.1:8080/api"),
        "API_TOKEN": os.environ.get("ENTITLEMENTS_API_TOKEN", ""),
        "TIMEOUT_SECONDS": 10,
    },
}

# Observability
OTEL_SERVICE_NAME = os.environ.get("OTEL_SERVICE_NAME", "entitlement-service")
OTEL_EXPORTER_OTLP_ENDPOINT = os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", "")

LOGGING = get_logging_config(os.environ.get("ENVIRONMENT", "development"))
