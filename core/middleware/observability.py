"""
Observability middleware.

Structured request logging with correlation ids. Every record carries the
active OpenTelemetry trace, the caller's role and, for quotation routes,
the calculation request being worked on.
"""

import logging
import time
import uuid
from typing import Callable, Dict, Optional

from django.http import HttpRequest, HttpResponse
from opentelemetry import trace

logger = logging.getLogger(__name__)

CALLBACK_PATH_PREFIX = "/api/v1/async/"


class ObservabilityMiddleware:
    """
    Middleware for request observability.

    This middleware:
    1. Reuses or generates the X-Correlation-ID for the request
    2. Logs request start and completion with quotation context
    3. Adds correlation, status and duration headers to the response
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.correlation_id = correlation_id  # type: ignore

        trace_fields = self._trace_fields()
        if trace_fields:
            request.trace_id = trace_fields["trace_id"]  # type: ignore

        fields = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.path,
            "channel": self._channel(request),
            "remote_addr": request.META.get("REMOTE_ADDR"),
            **trace_fields,
        }
        logger.info("Request started", extra=fields)

        start_time = time.time()
        try:
            response = self.get_response(request)
        except Exception as e:
            fields.update(
                request_status="exception",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=self._elapsed_ms(start_time),
            )
            logger.error("Request failed", extra=fields, exc_info=True)
            raise

        duration_ms = self._elapsed_ms(start_time)
        request_status = self._request_status(response.status_code)
        fields.update(
            request_status=request_status,
            status_code=response.status_code,
            duration_ms=duration_ms,
            **self._quotation_fields(request),
        )
        self._log_completion(response.status_code, fields)

        response["X-Correlation-ID"] = correlation_id
        response["X-Request-Status"] = request_status
        response["X-Request-Duration"] = f"{duration_ms / 1000:.3f}"
        if trace_fields:
            response["X-Trace-ID"] = trace_fields["trace_id"]
        return response

    @staticmethod
    def _trace_fields() -> Dict[str, str]:
        span_context = trace.get_current_span().get_span_context()
        if not span_context.is_valid:
            return {}
        return {
            "trace_id": trace.format_trace_id(span_context.trace_id),
            "span_id": trace.format_span_id(span_context.span_id),
        }

    @staticmethod
    def _channel(request: HttpRequest) -> str:
        """Pricer callbacks are logged apart from user traffic."""
        return "pricer_callback" if request.path.startswith(CALLBACK_PATH_PREFIX) else "api"

    @staticmethod
    def _quotation_fields(request: HttpRequest) -> Dict[str, Optional[str]]:
        """Role of the caller and ids taken from the resolved route."""
        fields: Dict[str, Optional[str]] = {}

        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            fields["user_id"] = str(user.pk)
            if user.is_superuser:
                fields["role"] = "admin"
            elif user.is_staff:
                fields["role"] = "moderator"
            else:
                fields["role"] = "buyer"

        match = getattr(request, "resolver_match", None)
        if match is not None:
            for key in ("request_id", "service_id"):
                if key in match.kwargs:
                    fields[key] = str(match.kwargs[key])
        return fields

    @staticmethod
    def _request_status(status_code: int) -> str:
        if status_code >= 500:
            return "server_error"
        if status_code >= 400:
            return "client_error"
        return "success"

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.time() - start_time) * 1000, 2)

    @staticmethod
    def _log_completion(status_code: int, fields: Dict) -> None:
        if status_code >= 500:
            logger.error("Request completed with server error", extra=fields)
        elif status_code >= 400:
            logger.warning("Request completed with client error", extra=fields)
        else:
            logger.info("Request completed successfully", extra=fields)
