"""
Catalog domain events.
"""

import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class LicenseServiceCreated(DomainEvent):
    """Event raised when a catalog entry is created."""

    def __init__(
        self,
        service_id: uuid.UUID,
        name: str,
        license_type: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(service_id), occurred_at=occurred_at)
        self.service_id = service_id
        self.name = name
        self.license_type = license_type

    def payload(self):
        return {"name": self.name, "license_type": self.license_type}


class LicenseServiceUpdated(DomainEvent):
    """Event raised when a catalog entry is edited."""

    def __init__(
        self,
        service_id: uuid.UUID,
        changed_fields: list,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(service_id), occurred_at=occurred_at)
        self.service_id = service_id
        self.changed_fields = changed_fields

    def payload(self):
        return {"changed_fields": list(self.changed_fields)}


class LicenseServiceDeleted(DomainEvent):
    """Event raised when a catalog entry is soft-deleted."""

    def __init__(self, service_id: uuid.UUID, occurred_at: Optional[datetime] = None):
        super().__init__(aggregate_id=str(service_id), occurred_at=occurred_at)
        self.service_id = service_id
