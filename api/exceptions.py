"""
API exception handlers.

Every failure leaves the API as {"error": {"code": ..., "message": ...}}.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    DomainException,
    InvalidStateError,
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    UnauthorizedError,
)
from core.metrics import errors_total

logger = logging.getLogger(__name__)

# First match wins; anything else derived from DomainException is a 400.
DOMAIN_STATUS_CODES = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    ((InvalidStateError, InvalidStateTransitionError), status.HTTP_409_CONFLICT),
)


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    request = context.get("request")
    trace_id = _get_trace_id(request)

    if isinstance(exc, DomainException):
        status_code = _status_for(exc)
        logger.warning(
            "Domain exception: %s - %s",
            exc.code,
            exc.message,
            extra={"trace_id": trace_id, "status_code": status_code},
        )
        return _error_response(exc.code, exc.message, status_code, trace_id)

    if isinstance(exc, APIException):
        # DRF's handler also sets WWW-Authenticate and Retry-After headers
        response = exception_handler(exc, context)
        code = str(getattr(exc, "default_code", "api_error")).upper().replace("-", "_")
        detail = response.data.get("detail", exc.default_detail) if isinstance(
            response.data, dict
        ) else response.data
        response.data = {"error": {"code": code, "message": detail}}
        if trace_id:
            response["X-Trace-ID"] = trace_id
        return response

    if isinstance(exc, Http404):
        return _error_response(
            "NOT_FOUND", "Resource not found", status.HTTP_404_NOT_FOUND, trace_id
        )

    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    errors_total.labels(
        error_type=type(exc).__name__,
        endpoint=request.path if request else "unknown",
    ).inc()
    return _error_response(
        "INTERNAL_ERROR",
        "An internal error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        trace_id,
    )


def _get_trace_id(request) -> Optional[str]:
    """Trace id set by ObservabilityMiddleware, falling back to the correlation id."""
    if request is None:
        return None
    return getattr(request, "trace_id", getattr(request, "correlation_id", None))


def _status_for(exc: DomainException) -> int:
    for exception_types, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, exception_types):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def _error_response(
    code: str, message: Any, status_code: int, trace_id: Optional[str]
) -> Response:
    response = Response({"error": {"code": code, "message": message}}, status=status_code)
    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response
