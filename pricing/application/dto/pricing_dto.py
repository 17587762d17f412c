"""
Pricing DTOs.
"""
import uuid
from dataclasses import dataclass
from decimal import Decimal


@dataclass
class DispatchSummaryDTO:
    """Outcome of one dispatch run over a request's lines."""

    request_id: uuid.UUID
    dispatched: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.dispatched + self.failed + self.skipped


@dataclass
class SubtotalReceiptDTO:
    """Result of applying a pricing callback."""

    request_id: uuid.UUID
    service_id: uuid.UUID
    sub_total: Decimal
    total_cost: Decimal
