"""
Request line handlers.

Add and remove catalog entries on a draft, and change support
coefficients while a request is draft or formed.
"""
import logging

from catalog.ports.license_service_repository import LicenseServiceRepository
from core.domain.exceptions import (
    InvalidStateError,
    LicenseServiceNotFoundError,
    LineNotFoundError,
)
from quotations.application.commands.add_service_to_request import (
    AddServiceToRequestCommand,
)
from quotations.application.commands.remove_service_from_request import (
    RemoveServiceFromRequestCommand,
)
from quotations.application.commands.update_support_coefficient import (
    UpdateSupportCoefficientCommand,
)
from quotations.application.dto.calculation_request_dto import (
    AddServiceResultDTO,
    CalculationRequestDTO,
)
from quotations.application.services.recalculation_service import RecalculationService
from quotations.application.services.request_access import load_request_for, reload_detail
from quotations.domain.calculation_request import COEFFICIENT_EDITABLE
from quotations.ports.calculation_request_repository import CalculationRequestRepository
from quotations.ports.request_line_repository import RequestLineRepository

logger = logging.getLogger(__name__)


class AddServiceToRequestHandler:
    """Handler for AddServiceToRequestCommand."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
        service_repository: LicenseServiceRepository,
        recalculation_service: RecalculationService,
    ):
        """Initialize handler with repositories."""
        self.request_repository = request_repository
        self.line_repository = line_repository
        self.service_repository = service_repository
        self.recalculation_service = recalculation_service

    async def handle(self, command: AddServiceToRequestCommand) -> AddServiceResultDTO:
        """
        Handle add service command.

        Gets or creates the actor's draft and adds the service to it.
        Adding a service already on the draft changes nothing.

        Args:
            command: AddServiceToRequestCommand

        Returns:
            AddServiceResultDTO

        Raises:
            LicenseServiceNotFoundError: If the catalog entry is missing or deleted
            InvalidStateError: If the draft was formed concurrently
            ValidationFailedError: If the request total would exceed the maximum amount
        """
        service = await self.service_repository.find_by_id(command.service_id)
        if not service:
            raise LicenseServiceNotFoundError(
                f"License service {command.service_id} not found"
            )

        draft, draft_created = await self.request_repository.get_or_create_draft(
            command.actor.user_id
        )
        await self.recalculation_service.price_lines(
            draft, draft.parameters, added_service_id=service.id
        )
        line, created = await self.line_repository.add_to_draft(draft.id, service.id)
        if line is None:
            raise InvalidStateError("Draft is no longer editable")

        if created:
            await self.recalculation_service.recalculate(draft.id)
            logger.info(
                "Service added to request",
                extra={
                    "request_id": str(draft.id),
                    "service_id": str(service.id),
                    "draft_created": draft_created,
                },
            )

        line_count = await self.line_repository.count(draft.id)
        return AddServiceResultDTO(
            request_id=draft.id,
            service_id=service.id,
            created=created,
            line_count=line_count,
        )


class RemoveServiceFromRequestHandler:
    """Handler for RemoveServiceFromRequestCommand."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
        service_repository: LicenseServiceRepository,
        recalculation_service: RecalculationService,
    ):
        """Initialize handler with repositories."""
        self.request_repository = request_repository
        self.line_repository = line_repository
        self.service_repository = service_repository
        self.recalculation_service = recalculation_service

    async def handle(self, command: RemoveServiceFromRequestCommand) -> CalculationRequestDTO:
        """
        Handle remove service command.

        Raises:
            RequestNotFoundError: If the request is not visible
            InvalidStateError: If the request is not a draft
            LineNotFoundError: If the service is not on the request
        """
        request = await load_request_for(
            command.actor,
            command.request_id,
            self.request_repository,
            owner_only_operation="remove services",
        )
        request.ensure_lines_editable()

        removed = await self.line_repository.remove_from_draft(
            request.id, command.service_id
        )
        if not removed:
            if await self.line_repository.find(request.id, command.service_id) is None:
                raise LineNotFoundError(
                    f"Service {command.service_id} is not on request {request.id}"
                )
            raise InvalidStateError("Request is no longer a draft")

        await self.recalculation_service.recalculate(request.id)
        logger.info(
            "Service removed from request",
            extra={"request_id": str(request.id), "service_id": str(command.service_id)},
        )
        return await reload_detail(
            request.id, self.request_repository, self.line_repository, self.service_repository
        )


class UpdateSupportCoefficientHandler:
    """Handler for UpdateSupportCoefficientCommand."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
        service_repository: LicenseServiceRepository,
        recalculation_service: RecalculationService,
    ):
        """Initialize handler with repositories."""
        self.request_repository = request_repository
        self.line_repository = line_repository
        self.service_repository = service_repository
        self.recalculation_service = recalculation_service

    async def handle(self, command: UpdateSupportCoefficientCommand) -> CalculationRequestDTO:
        """
        Handle update support coefficient command.

        Out-of-range values are clamped to [0.7, 3.0].

        Raises:
            RequestNotFoundError: If the request is not visible
            InvalidStateError: If the request is neither draft nor formed
            LineNotFoundError: If the service is not on the request
            ValidationFailedError: If the request total would exceed the maximum amount
        """
        request = await load_request_for(
            command.actor, command.request_id, self.request_repository
        )
        request.ensure_coefficient_editable()

        line = await self.line_repository.find(request.id, command.service_id)
        if not line:
            raise LineNotFoundError(
                f"Service {command.service_id} is not on request {request.id}"
            )
        updated = line.with_coefficient(command.support_coefficient)
        await self.recalculation_service.price_lines(
            request,
            request.parameters,
            coefficients={command.service_id: updated.support_coefficient},
        )

        written = await self.line_repository.update_coefficient(
            request.id,
            command.service_id,
            updated.support_coefficient,
            COEFFICIENT_EDITABLE,
        )
        if not written:
            raise InvalidStateError("Request no longer accepts coefficient changes")

        await self.recalculation_service.recalculate(request.id)
        logger.info(
            "Support coefficient updated",
            extra={
                "request_id": str(request.id),
                "service_id": str(command.service_id),
                "support_coefficient": str(updated.support_coefficient),
            },
        )
        return await reload_detail(
            request.id, self.request_repository, self.line_repository, self.service_repository
        )
