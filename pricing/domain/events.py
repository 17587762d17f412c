"""
Pricing domain events.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from core.domain.events import DomainEvent


class PricingTaskDispatched(DomainEvent):
    """Event raised when a pricing task is handed to the queue."""

    def __init__(
        self,
        request_id: uuid.UUID,
        service_id: uuid.UUID,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(request_id), occurred_at=occurred_at)
        self.request_id = request_id
        self.service_id = service_id

    def payload(self):
        return {"service_id": str(self.service_id)}


class PricingDispatchFailed(DomainEvent):
    """Event raised when a pricing task could not be enqueued or delivered."""

    def __init__(
        self,
        request_id: uuid.UUID,
        service_id: uuid.UUID,
        reason: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(request_id), occurred_at=occurred_at)
        self.request_id = request_id
        self.service_id = service_id
        self.reason = reason

    def payload(self):
        return {"service_id": str(self.service_id), "reason": self.reason}


class LineSubtotalReceived(DomainEvent):
    """Event raised when a priced sub-total is applied to a line."""

    def __init__(
        self,
        request_id: uuid.UUID,
        service_id: uuid.UUID,
        sub_total: Decimal,
        total_cost: Decimal,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(request_id), occurred_at=occurred_at)
        self.request_id = request_id
        self.service_id = service_id
        self.sub_total = sub_total
        self.total_cost = total_cost

    def payload(self):
        return {
            "service_id": str(self.service_id),
            "sub_total": str(self.sub_total),
            "total_cost": str(self.total_cost),
        }
