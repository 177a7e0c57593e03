"""
Core views for health checks and system status.
"""

from django.core.cache import cache
from django.http import HttpResponse, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest


def _cache_ok(key: str) -> bool:
    cache.set(key, "ok", 10)
    return cache.get(key) == "ok"


@method_decorator(csrf_exempt, name="dispatch")
class HealthView(View):
    """Health check endpoint."""

    def get(self, _request):
        """Return service health status."""
        return JsonResponse({"status": "healthy", "service": "entitlement-service"})


@method_decorator(csrf_exempt, name="dispatch")
class HealthCacheView(View):
    """Cache health check endpoint."""

    def get(self, _request):
        """Check cache connectivity."""
        try:
            if _cache_ok("health_check"):
                return JsonResponse({"status": "healthy", "cache": "connected"})
            return JsonResponse(
                {"status": "unhealthy", "cache": "disconnected"},
                status=503,
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            return JsonResponse(
                {"status": "unhealthy", "cache": "disconnected", "error": str(e)},
                status=503,
            )


@method_decorator(csrf_exempt, name="dispatch")
class ReadyView(View):
    """Readiness check endpoint."""

    def get(self, _request):
        """Check if service is ready to accept traffic."""
        checks = {"cache": self._check_cache()}

        all_healthy = all(checks.values())
        status_code = 200 if all_healthy else 503

        return JsonResponse(
            {
                "status": "ready" if all_healthy else "not_ready",
                "checks": checks,
            },
            status=status_code,
        )

    def _check_cache(self) -> bool:
        """Check cache connectivity."""
        try:
            return _cache_ok("ready_check")
        except Exception:  # pylint: disable=broad-exception-caught
            return False


class MetricsView(View):
    """Prometheus scrape endpoint."""

    def get(self, _request):
        """Render all registered metrics."""
        return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
