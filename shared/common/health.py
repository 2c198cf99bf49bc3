"""
Health Check Module.

Liveness and readiness endpoints for the booking service.
"""
import logging
import time
from typing import Dict, Any

from django.db import connection, DatabaseError
from django.core.cache import cache
from django.conf import settings
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class HealthStatus:
    """Health check status constants."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


def check_database() -> Dict[str, Any]:
    """Check database connectivity."""
    start = time.time()
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        latency = (time.time() - start) * 1000
        return {
            "name": "database",
            "status": HealthStatus.HEALTHY,
            "latency_ms": round(latency, 2),
        }
    except DatabaseError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "name": "database",
            "status": HealthStatus.UNHEALTHY,
            "error": str(e),
        }


def check_cache() -> Dict[str, Any]:
    """Check cache connectivity."""
    start = time.time()
    try:
        cache_key = f"health_check_{time.time()}"
        cache.set(cache_key, "OK", 10)
        value = cache.get(cache_key)
        cache.delete(cache_key)
    except Exception as e:
        logger.error(f"Cache health check failed: {e}")
        return {
            "name": "cache",
            "status": HealthStatus.UNHEALTHY,
            "error": str(e),
        }

    if value != "OK":
        return {
            "name": "cache",
            "status": HealthStatus.UNHEALTHY,
            "error": "Cache read/write mismatch",
        }

    latency = (time.time() - start) * 1000
    return {
        "name": "cache",
        "status": HealthStatus.HEALTHY,
        "latency_ms": round(latency, 2),
    }


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """
    Simple health check endpoint.

    Returns 200 if the service is running.
    """
    return Response({
        "status": HealthStatus.HEALTHY,
        "service": getattr(settings, 'SERVICE_NAME', 'unknown'),
        "timestamp": timezone.now().isoformat(),
    })


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def readiness_check(request):
    """
    Readiness check endpoint.

    Returns 503 when the database or cache cannot be reached.
    """
    checks = [
        check_database(),
        check_cache(),
    ]

    statuses = [c["status"] for c in checks]
    if HealthStatus.UNHEALTHY in statuses:
        overall_status = HealthStatus.UNHEALTHY
        status_code = 503
    else:
        overall_status = HealthStatus.HEALTHY
        status_code = 200

    return Response(
        {
            "status": overall_status,
            "checks": checks,
            "timestamp": timezone.now().isoformat(),
        },
        status=status_code
    )


def get_health_urlpatterns():
    """
    Returns URL patterns for health check endpoints.

    Usage in urls.py:
        from shared.common.health import get_health_urlpatterns
        urlpatterns += get_health_urlpatterns()
    """
    from django.urls import path

    return [
        path('health/', health_check, name='health'),
        path('ready/', readiness_check, name='readiness'),
    ]
