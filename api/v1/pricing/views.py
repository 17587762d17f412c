"""
Pricing callback API views.

Called by the external pricer, authenticated with the credential the
dispatcher put on the task rather than with a user session.
"""

import uuid

from asgiref.sync import async_to_sync
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.pricing.serializers import ReceiveSubtotalRequestSerializer, SubtotalReceiptSerializer
from catalog.infrastructure.repositories.django_license_service_repository import (
    DjangoLicenseServiceRepository,
)
from core.domain.exceptions import DomainException, UnauthorizedError
from core.instrumentation import Status, StatusCode, get_tracer
from core.metrics import pricing_callbacks_total
from pricing.application.commands.receive_subtotal import ReceiveSubtotalCommand
from pricing.application.handlers.receive_subtotal_handler import ReceiveSubtotalHandler
from pricing.infrastructure.authenticators import get_callback_authenticator
from quotations.application.services.recalculation_service import RecalculationService
from quotations.infrastructure.repositories.django_calculation_request_repository import (
    DjangoCalculationRequestRepository,
)
from quotations.infrastructure.repositories.django_request_line_repository import (
    DjangoRequestLineRepository,
)

# Initialize repositories (in production, use DI container)
_request_repo = DjangoCalculationRequestRepository()
_line_repo = DjangoRequestLineRepository()
_recalculation = RecalculationService(_request_repo, _line_repo, DjangoLicenseServiceRepository())

tracer = get_tracer(__name__)


class ReceiveSubtotalView(APIView):
    """View for the pricer's per-line sub-total callback."""

    authentication_classes = []

    def put(self, request: Request, request_id: uuid.UUID, service_id: uuid.UUID) -> Response:
        """Apply a priced sub-total to one line."""
        return async_to_sync(self._handle_receive_subtotal)(request, request_id, service_id)

    async def _handle_receive_subtotal(
        self, request: Request, request_id: uuid.UUID, service_id: uuid.UUID
    ) -> Response:
        """Async handler for receive sub-total."""
        with tracer.start_as_current_span("receive_subtotal") as span:
            span.set_attribute("operation", "receive_subtotal")
            span.set_attribute("request.id", str(request_id))
            span.set_attribute("service.id", str(service_id))

            authenticator = get_callback_authenticator()
            credential = request.headers.get(authenticator.header_name)
            if not authenticator.verify(credential, request_id, service_id):
                span.set_status(Status(StatusCode.ERROR, "Invalid callback credential"))
                pricing_callbacks_total.labels(outcome="unauthorized").inc()
                raise UnauthorizedError("Invalid or missing callback credential")

            serializer = ReceiveSubtotalRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                pricing_callbacks_total.labels(outcome="invalid").inc()
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            handler = ReceiveSubtotalHandler(
                request_repository=_request_repo,
                line_repository=_line_repo,
                recalculation_service=_recalculation,
            )
            command = ReceiveSubtotalCommand(
                request_id=request_id,
                service_id=service_id,
                sub_total=serializer.validated_data["subtotal"],
            )
            try:
                result = await handler.handle(command)
            except DomainException as e:
                pricing_callbacks_total.labels(outcome=e.code.lower()).inc()
                raise

            span.set_attribute("total_cost", str(result.total_cost))
            span.set_status(Status(StatusCode.OK))
            return Response(SubtotalReceiptSerializer(result).data, status=status.HTTP_200_OK)
