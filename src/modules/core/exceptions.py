"""API-wide error formatting.

Every error leaving the API is rendered as ``{"error": "<message>"}``.
Domain errors are translated by the views; this handler covers what
DRF raises itself (parse errors, unknown routes, bad methods) and any
exception nobody handled.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


def error_response(message: str, status_code: int) -> Response:
    """Build the standard JSON error response."""
    return Response({"error": message}, status=status_code)


def _flatten_detail(detail: Any) -> str:
    if isinstance(detail, dict):
        parts = [f"{key}: {_flatten_detail(value)}" for key, value in detail.items()]
        return "; ".join(parts)
    if isinstance(detail, list):
        return " ".join(_flatten_detail(item) for item in detail)
    return str(detail)


def api_exception_handler(
    exc: Exception, context: Dict[str, Any]
) -> Optional[Response]:
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "api.unhandled_exception",
            view=type(view).__name__ if view else None,
            error=str(exc),
        )
        return error_response(
            "Internal server error.", status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    data = response.data
    if isinstance(data, dict) and set(data) == {"detail"}:
        message = str(data["detail"])
    else:
        message = _flatten_detail(data)
    response.data = {"error": message}
    return response
