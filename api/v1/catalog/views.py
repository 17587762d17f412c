"""
Catalog API views.

Anyone may browse the catalog; moderators maintain it.
"""

import uuid

from asgiref.sync import async_to_sync
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.catalog.serializers import (
    CreateLicenseServiceRequestSerializer,
    LicenseServiceDTOSerializer,
    UpdateLicenseServiceRequestSerializer,
)
from api.v1.identity import actor_from_request
from catalog.application.commands.create_license_service import CreateLicenseServiceCommand
from catalog.application.commands.delete_license_service import DeleteLicenseServiceCommand
from catalog.application.commands.update_license_service import UpdateLicenseServiceCommand
from catalog.application.handlers.license_service_handlers import (
    CreateLicenseServiceHandler,
    DeleteLicenseServiceHandler,
    UpdateLicenseServiceHandler,
)
from catalog.application.handlers.license_service_query_handlers import (
    GetLicenseServiceHandler,
    ListLicenseServicesHandler,
)
from catalog.application.queries.get_license_service import GetLicenseServiceQuery
from catalog.application.queries.list_license_services import ListLicenseServicesQuery
from catalog.infrastructure.repositories.django_license_service_repository import (
    DjangoLicenseServiceRepository,
)
from core.instrumentation import Status, StatusCode, get_tracer

# Initialize repositories (in production, use DI container)
_service_repo = DjangoLicenseServiceRepository()

tracer = get_tracer(__name__)


class LicenseServiceListView(APIView):
    """View for listing and creating catalog entries."""

    def get(self, request: Request) -> Response:
        """List live catalog entries, optionally filtered by ?query=."""
        return async_to_sync(self._handle_list_services)(request)

    async def _handle_list_services(self, request: Request) -> Response:
        """Async handler for list services."""
        with tracer.start_as_current_span("list_license_services") as span:
            span.set_attribute("operation", "list_license_services")

            query = request.query_params.get("query")
            if query:
                span.set_attribute("query", query)

            handler = ListLicenseServicesHandler(service_repository=_service_repo)
            services = await handler.handle(ListLicenseServicesQuery(query=query))

            span.set_attribute("services.count", len(services))
            span.set_status(Status(StatusCode.OK))
            serializer = LicenseServiceDTOSerializer(services, many=True)
            return Response(serializer.data, status=status.HTTP_200_OK)

    def post(self, request: Request) -> Response:
        """Create a catalog entry (moderator-only)."""
        return async_to_sync(self._handle_create_service)(request)

    async def _handle_create_service(self, request: Request) -> Response:
        """Async handler for create service."""
        with tracer.start_as_current_span("create_license_service") as span:
            span.set_attribute("operation", "create_license_service")
            actor = actor_from_request(request)

            serializer = CreateLicenseServiceRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            handler = CreateLicenseServiceHandler(service_repository=_service_repo)
            command = CreateLicenseServiceCommand(actor=actor, **serializer.validated_data)
            result = await handler.handle(command)

            span.set_attribute("service.id", str(result.id))
            span.set_status(Status(StatusCode.OK))
            return Response(
                LicenseServiceDTOSerializer(result).data, status=status.HTTP_201_CREATED
            )


class LicenseServiceDetailView(APIView):
    """View for reading, updating and deleting one catalog entry."""

    def get(self, request: Request, service_id: uuid.UUID) -> Response:
        """Get a live catalog entry."""
        return async_to_sync(self._handle_get_service)(request, service_id)

    async def _handle_get_service(self, request: Request, service_id: uuid.UUID) -> Response:
        """Async handler for get service."""
        with tracer.start_as_current_span("get_license_service") as span:
            span.set_attribute("service.id", str(service_id))

            handler = GetLicenseServiceHandler(service_repository=_service_repo)
            result = await handler.handle(GetLicenseServiceQuery(service_id=service_id))

            span.set_status(Status(StatusCode.OK))
            return Response(LicenseServiceDTOSerializer(result).data, status=status.HTTP_200_OK)

    def put(self, request: Request, service_id: uuid.UUID) -> Response:
        """Sparse update of a catalog entry (moderator-only)."""
        return async_to_sync(self._handle_update_service)(request, service_id)

    async def _handle_update_service(self, request: Request, service_id: uuid.UUID) -> Response:
        """Async handler for update service."""
        with tracer.start_as_current_span("update_license_service") as span:
            span.set_attribute("service.id", str(service_id))
            actor = actor_from_request(request)

            serializer = UpdateLicenseServiceRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

            handler = UpdateLicenseServiceHandler(service_repository=_service_repo)
            command = UpdateLicenseServiceCommand(
                actor=actor, service_id=service_id, **serializer.validated_data
            )
            span.set_attribute("fields", ",".join(sorted(command.provided_fields())))
            result = await handler.handle(command)

            span.set_status(Status(StatusCode.OK))
            return Response(LicenseServiceDTOSerializer(result).data, status=status.HTTP_200_OK)

    def delete(self, request: Request, service_id: uuid.UUID) -> Response:
        """Soft-delete a catalog entry (moderator-only)."""
        return async_to_sync(self._handle_delete_service)(request, service_id)

    async def _handle_delete_service(self, request: Request, service_id: uuid.UUID) -> Response:
        """Async handler for delete service."""
        with tracer.start_as_current_span("delete_license_service") as span:
            span.set_attribute("service.id", str(service_id))
            actor = actor_from_request(request)

            handler = DeleteLicenseServiceHandler(service_repository=_service_repo)
            await handler.handle(DeleteLicenseServiceCommand(actor=actor, service_id=service_id))

            span.set_status(Status(StatusCode.OK))
            return Response(status=status.HTTP_204_NO_CONTENT)
