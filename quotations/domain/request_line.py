"""
RequestLine entity.

Association between a calculation request and a catalog entry,
carrying the pricing inputs and outputs of that pair.
"""
import uuid
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

from core.domain.value_objects import PricingStatus, SupportCoefficient

DEFAULT_SUPPORT_COEFFICIENT = Decimal("1.00")


@dataclass(frozen=True)
class RequestLine:
    """RequestLine domain entity."""

    id: uuid.UUID
    request_id: uuid.UUID
    service_id: uuid.UUID
    support_coefficient: Decimal
    sub_total: Decimal
    pricing_status: PricingStatus

    def __post_init__(self):
        """Validate request line."""
        SupportCoefficient(self.support_coefficient)
        if self.sub_total < 0:
            raise ValueError("Sub-total cannot be negative")

    @classmethod
    def create(
        cls,
        request_id: uuid.UUID,
        service_id: uuid.UUID,
        line_id: Optional[uuid.UUID] = None,
    ) -> "RequestLine":
        """
        Create a new unpriced line with the default coefficient.

        Args:
            request_id: Owning request UUID
            service_id: Catalog entry UUID
            line_id: Optional UUID (generated if not provided)

        Returns:
            RequestLine entity
        """
        return cls(
            id=line_id or uuid.uuid4(),
            request_id=request_id,
            service_id=service_id,
            support_coefficient=DEFAULT_SUPPORT_COEFFICIENT,
            sub_total=Decimal("0"),
            pricing_status=PricingStatus.NOT_REQUESTED,
        )

    @property
    def is_priced(self) -> bool:
        """A line counts as ready once it carries a positive sub-total."""
        return self.sub_total > 0

    def with_coefficient(self, raw) -> "RequestLine":
        """Return a copy with the coefficient clamped to its bounds."""
        return replace(self, support_coefficient=SupportCoefficient.clamp(raw).value)

    def with_sub_total(self, sub_total: Decimal, status: PricingStatus) -> "RequestLine":
        """Return a copy carrying a new sub-total."""
        return replace(self, sub_total=sub_total, pricing_status=status)
