"""
Request lifecycle handlers.

Handlers for update-parameters, format, complete, reject and delete.
Every transition is written with compare-and-set against the status read
at the start of the handler; losing that race raises
InvalidStateTransitionError and changes nothing.
"""
import logging

from catalog.ports.license_service_repository import LicenseServiceRepository
from core.domain.exceptions import (
    DomainException,
    InvalidStateError,
    InvalidStateTransitionError,
)
from core.domain.value_objects import PricingStatus, RequestStatus
from core.infrastructure.events import event_bus
from core.metrics import request_transitions_total
from pricing.application.dto.pricing_dto import DispatchSummaryDTO
from pricing.application.services.cost_dispatcher import CostDispatcher
from quotations.application.commands.complete_request import CompleteRequestCommand
from quotations.application.commands.delete_request import DeleteRequestCommand
from quotations.application.commands.format_request import FormatRequestCommand
from quotations.application.commands.reject_request import RejectRequestCommand
from quotations.application.commands.update_request_parameters import (
    UpdateRequestParametersCommand,
)
from quotations.application.dto.calculation_request_dto import (
    CalculationRequestDTO,
    CompletionResultDTO,
)
from quotations.application.services.recalculation_service import RecalculationService
from quotations.application.services.request_access import load_request_for, reload_detail
from quotations.domain.events import (
    RequestCompleted,
    RequestDeleted,
    RequestFormed,
    RequestRejected,
)
from quotations.ports.calculation_request_repository import CalculationRequestRepository
from quotations.ports.request_line_repository import RequestLineRepository

logger = logging.getLogger(__name__)


def _lost_race(request_id, expected: RequestStatus) -> InvalidStateTransitionError:
    return InvalidStateTransitionError(
        f"Request {request_id} is no longer {expected.value}"
    )


class UpdateRequestParametersHandler:
    """Handler for UpdateRequestParametersCommand."""

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

    async def handle(self, command: UpdateRequestParametersCommand) -> CalculationRequestDTO:
        """
        Handle update request parameters command.

        Args:
            command: UpdateRequestParametersCommand

        Returns:
            Updated CalculationRequestDTO

        Raises:
            RequestNotFoundError: If the request is not visible
            InvalidStateError: If the request is not a draft
            ValidationFailedError: If a provided value is out of range or the
                request total would exceed the maximum amount
        """
        request = await load_request_for(
            command.actor,
            command.request_id,
            self.request_repository,
            owner_only_operation="update usage parameters",
        )
        updated = request.update_parameters(
            users=command.users, cores=command.cores, period=command.period
        )

        # Priced before writing so an oversized total is rejected with nothing stored
        line_prices = await self.recalculation_service.price_lines(
            request, updated.parameters
        )
        if not self.recalculation_service.synchronous:
            line_prices = None

        if not await self.request_repository.update_parameters(updated, line_prices):
            raise InvalidStateError("Request is no longer a draft")

        logger.info(
            "Request parameters updated",
            extra={
                "request_id": str(request.id),
                "users": updated.users,
                "cores": updated.cores,
                "period": updated.period,
            },
        )
        return await reload_detail(
            request.id, self.request_repository, self.line_repository, self.service_repository
        )


class FormatRequestHandler:
    """Handler for FormatRequestCommand."""

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

    async def handle(self, command: FormatRequestCommand) -> CalculationRequestDTO:
        """
        Handle format request command.

        Sub-totals are reset together with the status change, then
        recalculated.

        Raises:
            RequestNotFoundError: If the request is missing, deleted or not visible
            InvalidStateTransitionError: If the request is not a draft
            PreconditionFailedError: If the draft is not ready to be formed
        """
        request = await load_request_for(
            command.actor,
            command.request_id,
            self.request_repository,
            owner_only_operation="submit the request",
        )
        line_count = await self.line_repository.count(request.id)
        formed = request.format(line_count)

        written = await self.request_repository.apply_transition(
            formed, RequestStatus.DRAFT, reset_lines_to=PricingStatus.NOT_REQUESTED
        )
        if not written:
            raise _lost_race(request.id, RequestStatus.DRAFT)

        await self.recalculation_service.recalculate(request.id)
        request_transitions_total.labels(transition="format").inc()
        logger.info(
            "Request formed",
            extra={"request_id": str(request.id), "line_count": line_count},
        )
        await event_bus.publish(
            RequestFormed(
                request_id=request.id,
                creator_id=request.creator_id,
                line_count=line_count,
            )
        )
        return await reload_detail(
            request.id, self.request_repository, self.line_repository, self.service_repository
        )


class CompleteRequestHandler:
    """Handler for CompleteRequestCommand."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
        service_repository: LicenseServiceRepository,
        cost_dispatcher: CostDispatcher,
    ):
        """Initialize handler with repositories and the cost dispatcher."""
        self.request_repository = request_repository
        self.line_repository = line_repository
        self.service_repository = service_repository
        self.cost_dispatcher = cost_dispatcher

    async def handle(self, command: CompleteRequestCommand) -> CompletionResultDTO:
        """
        Handle complete request command.

        Lines are reset to zero and marked pending in the same write as
        the status change; pricing is then dispatched once. Dispatch
        problems are logged and never fail the completion.

        Raises:
            PermissionDeniedError: If the actor is not a moderator
            RequestNotFoundError: If the request is missing or deleted
            InvalidStateTransitionError: If the request is not formed
        """
        command.actor.require_moderator("complete requests")
        request = await load_request_for(
            command.actor, command.request_id, self.request_repository
        )
        completed = request.complete(moderator_id=command.actor.user_id)

        written = await self.request_repository.apply_transition(
            completed, RequestStatus.FORMED, reset_lines_to=PricingStatus.PENDING
        )
        if not written:
            raise _lost_race(request.id, RequestStatus.FORMED)

        request_transitions_total.labels(transition="complete").inc()
        logger.info(
            "Request completed",
            extra={"request_id": str(request.id), "moderator_id": command.actor.user_id},
        )
        await event_bus.publish(
            RequestCompleted(request_id=request.id, moderator_id=command.actor.user_id)
        )

        try:
            summary = await self.cost_dispatcher.dispatch(request.id)
        except DomainException as e:
            logger.error(
                f"Pricing dispatch aborted: {e.message}",
                extra={"request_id": str(request.id)},
            )
            summary = DispatchSummaryDTO(request_id=request.id)

        detail = await reload_detail(
            request.id, self.request_repository, self.line_repository, self.service_repository
        )
        return CompletionResultDTO(request=detail, dispatch=summary)


class RejectRequestHandler:
    """Handler for RejectRequestCommand."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
        service_repository: LicenseServiceRepository,
    ):
        """Initialize handler with repositories."""
        self.request_repository = request_repository
        self.line_repository = line_repository
        self.service_repository = service_repository

    async def handle(self, command: RejectRequestCommand) -> CalculationRequestDTO:
        """
        Handle reject request command.

        Raises:
            PermissionDeniedError: If the actor is not a moderator
            RequestNotFoundError: If the request is missing or deleted
            InvalidStateTransitionError: If the request is not formed
        """
        command.actor.require_moderator("reject requests")
        request = await load_request_for(
            command.actor, command.request_id, self.request_repository
        )
        rejected = request.reject(moderator_id=command.actor.user_id)

        if not await self.request_repository.apply_transition(rejected, RequestStatus.FORMED):
            raise _lost_race(request.id, RequestStatus.FORMED)

        request_transitions_total.labels(transition="reject").inc()
        logger.info(
            "Request rejected",
            extra={"request_id": str(request.id), "moderator_id": command.actor.user_id},
        )
        await event_bus.publish(
            RequestRejected(request_id=request.id, moderator_id=command.actor.user_id)
        )
        return await reload_detail(
            request.id, self.request_repository, self.line_repository, self.service_repository
        )


class DeleteRequestHandler:
    """Handler for DeleteRequestCommand."""

    def __init__(self, request_repository: CalculationRequestRepository):
        """Initialize handler with repository."""
        self.request_repository = request_repository

    async def handle(self, command: DeleteRequestCommand) -> None:
        """
        Handle delete request command.

        Only the status changes; lines are kept.

        Raises:
            RequestNotFoundError: If the request is missing, deleted or not visible
            InvalidStateTransitionError: If the request is not a draft
        """
        request = await load_request_for(
            command.actor, command.request_id, self.request_repository
        )
        deleted = request.delete()

        if not await self.request_repository.apply_transition(deleted, RequestStatus.DRAFT):
            raise _lost_race(request.id, RequestStatus.DRAFT)

        request_transitions_total.labels(transition="delete").inc()
        logger.info(
            "Request deleted",
            extra={"request_id": str(request.id), "deleted_by": command.actor.user_id},
        )
        await event_bus.publish(
            RequestDeleted(request_id=request.id, deleted_by=command.actor.user_id)
        )
