"""
Recalculation service.

Keeps line sub-totals and the request total consistent after every
mutation of a request or its lines.
"""
import logging
import uuid
from decimal import Decimal
from typing import Dict, Optional, Tuple

from catalog.ports.license_service_repository import LicenseServiceRepository
from core.domain.exceptions import ValidationFailedError
from core.domain.value_objects import MAX_MONEY, PricingStatus, RequestStatus, UsageParameters
from core.metrics import recalculations_total
from pricing.config import get_pricing_settings
from quotations.domain.calculation_request import LicenseCalculationRequest
from quotations.domain.request_line import RequestLine
from quotations.domain.services import CostCalculator
from quotations.ports.calculation_request_repository import CalculationRequestRepository
from quotations.ports.request_line_repository import RequestLineRepository

logger = logging.getLogger(__name__)

REPRICEABLE = frozenset({RequestStatus.DRAFT, RequestStatus.FORMED})

LinePrices = Dict[uuid.UUID, Tuple[Decimal, PricingStatus]]


class RecalculationService:
    """Reprices lines in synchronous mode and re-sums the request total."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
        service_repository: LicenseServiceRepository,
    ):
        """Initialize service with repositories."""
        self.request_repository = request_repository
        self.line_repository = line_repository
        self.service_repository = service_repository

    @property
    def synchronous(self) -> bool:
        """True when lines are priced in-process instead of by the external pricer."""
        return get_pricing_settings().synchronous

    async def recalculate(self, request_id: uuid.UUID) -> Decimal:
        """
        Recalculate a request.

        Without an external pricer, lines of a draft or formed request are
        repriced with CostCalculator first. Completed requests keep the
        sub-totals written by pricing callbacks.

        Args:
            request_id: Request UUID

        Returns:
            New total cost
        """
        request = await self.request_repository.find_by_id(request_id)
        if request is not None and request.status in REPRICEABLE and self.synchronous:
            changed = await self.price_lines(request, request.parameters)
            for service_id, (sub_total, status) in changed.items():
                await self.line_repository.set_sub_total(
                    request.id, service_id, sub_total, status
                )

        total = await self.request_repository.recalculate_total(request_id)
        recalculations_total.inc()
        logger.debug(
            "Request total recalculated",
            extra={"request_id": str(request_id), "total_cost": str(total)},
        )
        return total

    async def price_lines(
        self,
        request: LicenseCalculationRequest,
        parameters: UsageParameters,
        coefficients: Optional[Dict[uuid.UUID, Decimal]] = None,
        added_service_id: Optional[uuid.UUID] = None,
    ) -> LinePrices:
        """
        Price every live line of a request without writing anything.

        Args:
            request: Request whose lines are priced
            parameters: Usage parameters to price with
            coefficients: Support coefficients overriding the stored ones, by service ID
            added_service_id: Catalog entry about to be added, priced as a new line

        Returns:
            New (sub-total, pricing status) of the lines whose stored values differ

        Raises:
            ValidationFailedError: If a sub-total or the request total would
                exceed the largest storable amount
        """
        lines = list(await self.line_repository.find_by_request(request.id))
        if added_service_id is not None and all(
            line.service_id != added_service_id for line in lines
        ):
            lines.append(RequestLine.create(request.id, added_service_id))
        if not lines:
            return {}

        services = await self.service_repository.find_by_ids(
            [line.service_id for line in lines]
        )
        coefficients = coefficients or {}
        changed: LinePrices = {}
        total = Decimal("0")
        for line in lines:
            service = services.get(line.service_id)
            if service is None:
                # Soft-deleted catalog entry, excluded from the total
                continue
            sub_total = CostCalculator.sub_total(
                service.base_price,
                service.license_type,
                coefficients.get(line.service_id, line.support_coefficient),
                parameters,
            )
            total += sub_total
            if total > MAX_MONEY:
                raise ValidationFailedError(
                    f"Request total would exceed the maximum amount of {MAX_MONEY}"
                )
            status = PricingStatus.PRICED if sub_total > 0 else PricingStatus.NOT_REQUESTED
            if sub_total != line.sub_total or status != line.pricing_status:
                changed[line.service_id] = (sub_total, status)
        return changed
