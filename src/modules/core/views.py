"""Liveness probe for load balancers and the seed/runserver workflow."""

import time
from typing import Any, Dict

import structlog
from django.db import DatabaseError, connection
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger(__name__)


def probe_database() -> Dict[str, Any]:
    """Round-trip ``SELECT 1`` on the default connection.

    Raises:
        DatabaseError: the store is unreachable or rejected the query.
    """
    started = time.monotonic()
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()
    return {
        "status": "up",
        "vendor": connection.vendor,
        "response_time_ms": round((time.monotonic() - started) * 1000, 2),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """GET /health

    200 with the store's round-trip time when it answers, 503 otherwise.
    """
    try:
        database = probe_database()
    except DatabaseError as exc:
        logger.error("health_check.database_down", error=str(exc))
        database = {"status": "down"}

    healthy = database["status"] == "up"
    logger.info("health_check.completed", healthy=healthy)
    return JsonResponse(
        {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": timezone.now().isoformat(),
            "services": {"database": database},
        },
        status=200 if healthy else 503,
    )
