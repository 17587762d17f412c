"""
Calculation request API views.

Buyers assemble and submit requests; moderators complete or reject
them. Every view runs its handler inside a manual span.
"""

import uuid

from asgiref.sync import async_to_sync
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.identity import actor_from_request
from api.v1.quotations.serializers import (
    AddServiceRequestSerializer,
    AddServiceResultSerializer,
    CalculationRequestDetailSerializer,
    CalculationRequestSummarySerializer,
    CartSerializer,
    CompletionResultSerializer,
    ListRequestsQuerySerializer,
    UpdateRequestParametersSerializer,
    UpdateSupportCoefficientSerializer,
)
from catalog.infrastructure.repositories.django_license_service_repository import (
    DjangoLicenseServiceRepository,
)
from core.domain.value_objects import RequestStatus
from core.instrumentation import Status, StatusCode, get_tracer
from pricing.application.services.cost_dispatcher import CostDispatcher
from pricing.infrastructure.authenticators import get_callback_authenticator
from pricing.infrastructure.celery_task_queue import CeleryPricingTaskQueue
from quotations.application.commands.add_service_to_request import (
    AddServiceToRequestCommand,
)
from quotations.application.commands.complete_request import CompleteRequestCommand
from quotations.application.commands.delete_request import DeleteRequestCommand
from quotations.application.commands.format_request import FormatRequestCommand
from quotations.application.commands.reject_request import RejectRequestCommand
from quotations.application.commands.remove_service_from_request import (
    RemoveServiceFromRequestCommand,
)
from quotations.application.commands.update_request_parameters import (
    UpdateRequestParametersCommand,
)
from quotations.application.commands.update_support_coefficient import (
    UpdateSupportCoefficientCommand,
)
from quotations.application.handlers.request_lifecycle_handlers import (
    CompleteRequestHandler,
    DeleteRequestHandler,
    FormatRequestHandler,
    RejectRequestHandler,
    UpdateRequestParametersHandler,
)
from quotations.application.handlers.request_line_handlers import (
    AddServiceToRequestHandler,
    RemoveServiceFromRequestHandler,
    UpdateSupportCoefficientHandler,
)
from quotations.application.handlers.request_query_handlers import (
    GetCartHandler,
    GetRequestHandler,
    ListRequestsHandler,
)
from quotations.application.queries.get_cart import GetCartQuery
from quotations.application.queries.get_request import GetRequestQuery
from quotations.application.queries.list_requests import ListRequestsQuery
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
_service_repo = DjangoLicenseServiceRepository()
_recalculation = RecalculationService(_request_repo, _line_repo, _service_repo)

tracer = get_tracer(__name__)


def _cost_dispatcher() -> CostDispatcher:
    return CostDispatcher(
        request_repository=_request_repo,
        line_repository=_line_repo,
        service_repository=_service_repo,
        task_queue=CeleryPricingTaskQueue(),
        authenticator=get_callback_authenticator(),
    )


def _line_handler_kwargs() -> dict:
    return {
        "request_repository": _request_repo,
        "line_repository": _line_repo,
        "service_repository": _service_repo,
        "recalculation_service": _recalculation,
    }


class AddServiceToRequestView(APIView):
    """View for adding a catalog entry to the caller's draft."""

    def post(self, request: Request) -> Response:
        """Get or create the draft and add the service to it."""
        return async_to_sync(self._handle_add_service)(request)

    async def _handle_add_service(self, request: Request) -> Response:
        """Async handler for add-to-request."""
        with tracer.start_as_current_span("add_service_to_request") as span:
            span.set_attribute("operation", "add_service_to_request")
            actor = actor_from_request(request)

            serializer = AddServiceRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            handler = AddServiceToRequestHandler(**_line_handler_kwargs())
            result = await handler.handle(
                AddServiceToRequestCommand(
                    actor=actor, service_id=serializer.validated_data["service_id"]
                )
            )

            span.set_attribute("request.id", str(result.request_id))
            span.set_attribute("line.created", result.created)
            span.set_status(Status(StatusCode.OK))
            return Response(
                AddServiceResultSerializer(result).data,
                status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
            )


class CartView(APIView):
    """View for the caller's current draft summary."""

    def get(self, request: Request) -> Response:
        """Return the draft id and line count."""
        return async_to_sync(self._handle_get_cart)(request)

    async def _handle_get_cart(self, request: Request) -> Response:
        """Async handler for get cart."""
        with tracer.start_as_current_span("get_cart") as span:
            actor = actor_from_request(request)

            handler = GetCartHandler(request_repository=_request_repo, line_repository=_line_repo)
            result = await handler.handle(GetCartQuery(actor=actor))

            span.set_attribute("line_count", result.line_count)
            span.set_status(Status(StatusCode.OK))
            return Response(CartSerializer(result).data, status=status.HTTP_200_OK)


class RequestListView(APIView):
    """View for listing calculation requests."""

    def get(self, request: Request) -> Response:
        """List requests filtered by ?status=&date_from=&date_to=."""
        return async_to_sync(self._handle_list_requests)(request)

    async def _handle_list_requests(self, request: Request) -> Response:
        """Async handler for list requests."""
        with tracer.start_as_current_span("list_requests") as span:
            actor = actor_from_request(request)

            serializer = ListRequestsQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            filters = serializer.validated_data
            request_status = filters.get("status")
            handler = ListRequestsHandler(request_repository=_request_repo, line_repository=_line_repo)
            results = await handler.handle(
                ListRequestsQuery(
                    actor=actor,
                    status=RequestStatus(request_status) if request_status else None,
                    date_from=filters.get("date_from"),
                    date_to=filters.get("date_to"),
                )
            )

            span.set_attribute("requests.count", len(results))
            span.set_status(Status(StatusCode.OK))
            return Response(
                CalculationRequestSummarySerializer(results, many=True).data,
                status=status.HTTP_200_OK,
            )


class RequestDetailView(APIView):
    """View for reading, updating and deleting one calculation request."""

    def get(self, request: Request, request_id: uuid.UUID) -> Response:
        """Get request detail with lines."""
        return async_to_sync(self._handle_get_request)(request, request_id)

    async def _handle_get_request(self, request: Request, request_id: uuid.UUID) -> Response:
        """Async handler for get request."""
        with tracer.start_as_current_span("get_request") as span:
            span.set_attribute("request.id", str(request_id))
            actor = actor_from_request(request)

            handler = GetRequestHandler(
                request_repository=_request_repo,
                line_repository=_line_repo,
                service_repository=_service_repo,
            )
            result = await handler.handle(GetRequestQuery(actor=actor, request_id=request_id))

            span.set_status(Status(StatusCode.OK))
            return Response(
                CalculationRequestDetailSerializer(result).data, status=status.HTTP_200_OK
            )

    def put(self, request: Request, request_id: uuid.UUID) -> Response:
        """Update usage parameters of a draft."""
        return async_to_sync(self._handle_update_parameters)(request, request_id)

    async def _handle_update_parameters(
        self, request: Request, request_id: uuid.UUID
    ) -> Response:
        """Async handler for update parameters."""
        with tracer.start_as_current_span("update_request_parameters") as span:
            span.set_attribute("request.id", str(request_id))
            actor = actor_from_request(request)

            serializer = UpdateRequestParametersSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            handler = UpdateRequestParametersHandler(**_line_handler_kwargs())
            result = await handler.handle(
                UpdateRequestParametersCommand(
                    actor=actor, request_id=request_id, **serializer.validated_data
                )
            )

            span.set_status(Status(StatusCode.OK))
            return Response(
                CalculationRequestDetailSerializer(result).data, status=status.HTTP_200_OK
            )

    def delete(self, request: Request, request_id: uuid.UUID) -> Response:
        """Soft-delete a draft."""
        return async_to_sync(self._handle_delete_request)(request, request_id)

    async def _handle_delete_request(self, request: Request, request_id: uuid.UUID) -> Response:
        """Async handler for delete request."""
        with tracer.start_as_current_span("delete_request") as span:
            span.set_attribute("request.id", str(request_id))
            actor = actor_from_request(request)

            handler = DeleteRequestHandler(request_repository=_request_repo)
            await handler.handle(DeleteRequestCommand(actor=actor, request_id=request_id))

            span.set_status(Status(StatusCode.OK))
            return Response(status=status.HTTP_204_NO_CONTENT)


class FormatRequestView(APIView):
    """View for submitting a draft for moderation."""

    def put(self, request: Request, request_id: uuid.UUID) -> Response:
        """Move a request from draft to formed."""
        return async_to_sync(self._handle_format_request)(request, request_id)

    async def _handle_format_request(self, request: Request, request_id: uuid.UUID) -> Response:
        """Async handler for format request."""
        with tracer.start_as_current_span("format_request") as span:
            span.set_attribute("request.id", str(request_id))
            actor = actor_from_request(request)

            handler = FormatRequestHandler(**_line_handler_kwargs())
            result = await handler.handle(FormatRequestCommand(actor=actor, request_id=request_id))

            span.set_attribute("total_cost", str(result.total_cost))
            span.set_status(Status(StatusCode.OK))
            return Response(
                CalculationRequestDetailSerializer(result).data, status=status.HTTP_200_OK
            )


class CompleteRequestView(APIView):
    """View for approving a formed request (moderator-only)."""

    def put(self, request: Request, request_id: uuid.UUID) -> Response:
        """Move a request from formed to completed and dispatch pricing."""
        return async_to_sync(self._handle_complete_request)(request, request_id)

    async def _handle_complete_request(
        self, request: Request, request_id: uuid.UUID
    ) -> Response:
        """Async handler for complete request."""
        with tracer.start_as_current_span("complete_request") as span:
            span.set_attribute("request.id", str(request_id))
            actor = actor_from_request(request)

            handler = CompleteRequestHandler(
                request_repository=_request_repo,
                line_repository=_line_repo,
                service_repository=_service_repo,
                cost_dispatcher=_cost_dispatcher(),
            )
            result = await handler.handle(
                CompleteRequestCommand(actor=actor, request_id=request_id)
            )

            span.set_attribute("pricing.dispatched", result.dispatch.dispatched)
            span.set_attribute("pricing.failed", result.dispatch.failed)
            span.set_status(Status(StatusCode.OK))
            return Response(CompletionResultSerializer(result).data, status=status.HTTP_200_OK)


class RejectRequestView(APIView):
    """View for rejecting a formed request (moderator-only)."""

    def put(self, request: Request, request_id: uuid.UUID) -> Response:
        """Move a request from formed to rejected."""
        return async_to_sync(self._handle_reject_request)(request, request_id)

    async def _handle_reject_request(self, request: Request, request_id: uuid.UUID) -> Response:
        """Async handler for reject request."""
        with tracer.start_as_current_span("reject_request") as span:
            span.set_attribute("request.id", str(request_id))
            actor = actor_from_request(request)

            handler = RejectRequestHandler(
                request_repository=_request_repo,
                line_repository=_line_repo,
                service_repository=_service_repo,
            )
            result = await handler.handle(RejectRequestCommand(actor=actor, request_id=request_id))

            span.set_status(Status(StatusCode.OK))
            return Response(
                CalculationRequestDetailSerializer(result).data, status=status.HTTP_200_OK
            )


class RequestLineView(APIView):
    """View for changing or removing one line of a request."""

    def put(self, request: Request, request_id: uuid.UUID, service_id: uuid.UUID) -> Response:
        """Change the line's support coefficient."""
        return async_to_sync(self._handle_update_coefficient)(request, request_id, service_id)

    async def _handle_update_coefficient(
        self, request: Request, request_id: uuid.UUID, service_id: uuid.UUID
    ) -> Response:
        """Async handler for update support coefficient."""
        with tracer.start_as_current_span("update_support_coefficient") as span:
            span.set_attribute("request.id", str(request_id))
            span.set_attribute("service.id", str(service_id))
            actor = actor_from_request(request)

            serializer = UpdateSupportCoefficientSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            handler = UpdateSupportCoefficientHandler(**_line_handler_kwargs())
            result = await handler.handle(
                UpdateSupportCoefficientCommand(
                    actor=actor,
                    request_id=request_id,
                    service_id=service_id,
                    support_coefficient=serializer.validated_data["support_coefficient"],
                )
            )

            span.set_status(Status(StatusCode.OK))
            return Response(
                CalculationRequestDetailSerializer(result).data, status=status.HTTP_200_OK
            )

    def delete(self, request: Request, request_id: uuid.UUID, service_id: uuid.UUID) -> Response:
        """Remove the service from a draft."""
        return async_to_sync(self._handle_remove_service)(request, request_id, service_id)

    async def _handle_remove_service(
        self, request: Request, request_id: uuid.UUID, service_id: uuid.UUID
    ) -> Response:
        """Async handler for remove service."""
        with tracer.start_as_current_span("remove_service_from_request") as span:
            span.set_attribute("request.id", str(request_id))
            span.set_attribute("service.id", str(service_id))
            actor = actor_from_request(request)

            handler = RemoveServiceFromRequestHandler(**_line_handler_kwargs())
            result = await handler.handle(
                RemoveServiceFromRequestCommand(
                    actor=actor, request_id=request_id, service_id=service_id
                )
            )

            span.set_status(Status(StatusCode.OK))
            return Response(
                CalculationRequestDetailSerializer(result).data, status=status.HTTP_200_OK
            )
