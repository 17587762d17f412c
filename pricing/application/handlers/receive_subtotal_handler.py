"""
Receive sub-total handler.

Applies one pricing result to its line and re-sums the request. Callback
credentials are checked by the caller before this handler runs.
"""
import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal

from core.domain.exceptions import (
    LineNotFoundError,
    RequestNotFoundError,
    ValidationFailedError,
)
from core.domain.value_objects import CENT, MAX_MONEY, PricingStatus, RequestStatus
from core.infrastructure.events import event_bus
from pricing.application.commands.receive_subtotal import ReceiveSubtotalCommand
from pricing.application.dto.pricing_dto import SubtotalReceiptDTO
from pricing.domain.events import LineSubtotalReceived
from quotations.application.services.recalculation_service import RecalculationService
from quotations.ports.calculation_request_repository import CalculationRequestRepository
from quotations.ports.request_line_repository import RequestLineRepository

logger = logging.getLogger(__name__)


class ReceiveSubtotalHandler:
    """Handler for ReceiveSubtotalCommand."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
        recalculation_service: RecalculationService,
    ):
        """Initialize handler with repositories and the recalculation service."""
        self.request_repository = request_repository
        self.line_repository = line_repository
        self.recalculation_service = recalculation_service

    async def handle(self, command: ReceiveSubtotalCommand) -> SubtotalReceiptDTO:
        """
        Handle a pricing callback.

        Re-delivering the same sub-total leaves the line and the total
        unchanged.

        Args:
            command: ReceiveSubtotalCommand

        Returns:
            SubtotalReceiptDTO with the new request total

        Raises:
            ValidationFailedError: If the sub-total is not positive or the
                request total would exceed the maximum amount
            RequestNotFoundError: If the request is missing or deleted
            InvalidStateError: If the request is not completed
            LineNotFoundError: If the service is not on the request
        """
        if command.sub_total is None or command.sub_total <= 0:
            raise ValidationFailedError("Sub-total must be greater than zero")
        sub_total = command.sub_total.quantize(CENT, rounding=ROUND_HALF_UP)
        return await self._apply(command.request_id, command.service_id, sub_total)

    async def record_unbillable(
        self, request_id: uuid.UUID, service_id: uuid.UUID
    ) -> SubtotalReceiptDTO:
        """
        Price a zero-quantity line at 0 under the same request checks as a callback.

        Raises:
            RequestNotFoundError: If the request is missing or deleted
            InvalidStateError: If the request is not completed
            LineNotFoundError: If the service is not on the request
        """
        return await self._apply(request_id, service_id, Decimal("0"))

    async def _apply(
        self, request_id: uuid.UUID, service_id: uuid.UUID, sub_total: Decimal
    ) -> SubtotalReceiptDTO:
        request = await self.request_repository.find_by_id(request_id)
        if request is None:
            raise RequestNotFoundError(f"Request {request_id} not found")
        request.ensure_status({RequestStatus.COMPLETED}, "accept a pricing result")

        lines = await self.line_repository.find_by_request(request_id)
        others = sum(
            (line.sub_total for line in lines if line.service_id != service_id), Decimal("0")
        )
        if others + sub_total > MAX_MONEY:
            raise ValidationFailedError(
                f"Request total would exceed the maximum amount of {MAX_MONEY}"
            )

        written = await self.line_repository.set_sub_total(
            request_id, service_id, sub_total, PricingStatus.PRICED
        )
        if not written:
            raise LineNotFoundError(
                f"Service {service_id} is not on request {request_id}"
            )

        total = await self.recalculation_service.recalculate(request_id)

        logger.info(
            "Line sub-total received",
            extra={
                "request_id": str(request_id),
                "service_id": str(service_id),
                "sub_total": str(sub_total),
                "total_cost": str(total),
            },
        )
        await event_bus.publish(
            LineSubtotalReceived(
                request_id=request_id,
                service_id=service_id,
                sub_total=sub_total,
                total_cost=total,
            )
        )
        return SubtotalReceiptDTO(
            request_id=request_id,
            service_id=service_id,
            sub_total=sub_total,
            total_cost=total,
        )
