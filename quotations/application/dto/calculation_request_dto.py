"""
Calculation request DTOs for API responses.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from catalog.domain.license_service import LicenseService
from pricing.application.dto.pricing_dto import DispatchSummaryDTO
from quotations.domain.calculation_request import LicenseCalculationRequest
from quotations.domain.request_line import RequestLine


@dataclass
class RequestLineDTO:
    """DTO for a request line joined to its live catalog entry."""

    service_id: uuid.UUID
    name: str
    license_type: str
    base_price: Decimal
    image_url: Optional[str]
    support_coefficient: Decimal
    sub_total: Decimal
    pricing_status: str

    @classmethod
    def from_entities(cls, line: RequestLine, service: LicenseService) -> "RequestLineDTO":
        return cls(
            service_id=line.service_id,
            name=service.name,
            license_type=service.license_type.value,
            base_price=service.base_price,
            image_url=service.image_url,
            support_coefficient=line.support_coefficient,
            sub_total=line.sub_total,
            pricing_status=line.pricing_status.value,
        )


@dataclass
class CalculationRequestDTO:
    """DTO for a calculation request."""

    id: uuid.UUID
    status: str
    creator_id: int
    moderator_id: Optional[int]
    users: int
    cores: int
    period: int
    total_cost: Decimal
    ready_count: int
    created_at: datetime
    formatted_at: Optional[datetime]
    completed_at: Optional[datetime]
    lines: List[RequestLineDTO] = field(default_factory=list)

    @classmethod
    def from_entity(
        cls,
        request: LicenseCalculationRequest,
        lines: Optional[List[RequestLineDTO]] = None,
        ready_count: int = 0,
    ) -> "CalculationRequestDTO":
        """Build the DTO from a domain entity and its rendered lines."""
        return cls(
            id=request.id,
            status=request.status.value,
            creator_id=request.creator_id,
            moderator_id=request.moderator_id,
            users=request.users,
            cores=request.cores,
            period=request.period,
            total_cost=request.total_cost,
            ready_count=ready_count,
            created_at=request.created_at,
            formatted_at=request.formatted_at,
            completed_at=request.completed_at,
            lines=lines or [],
        )


@dataclass
class CartDTO:
    """DTO for the caller's current draft."""

    request_id: Optional[uuid.UUID]
    line_count: int


@dataclass
class AddServiceResultDTO:
    """DTO for add-to-request response."""

    request_id: uuid.UUID
    service_id: uuid.UUID
    created: bool
    line_count: int


@dataclass
class CompletionResultDTO:
    """DTO for complete response: the request and its dispatch outcome."""

    request: CalculationRequestDTO
    dispatch: DispatchSummaryDTO
