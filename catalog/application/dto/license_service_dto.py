"""
Catalog DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from catalog.domain.license_service import LicenseService


@dataclass
class LicenseServiceDTO:
    """DTO for a catalog entry."""

    id: uuid.UUID
    name: str
    description: str
    base_price: Decimal
    license_type: str
    support_level: str
    max_users: Optional[int]
    validity_years: int
    image_url: Optional[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, service: LicenseService) -> "LicenseServiceDTO":
        """Build the DTO from a domain entity."""
        return cls(
            id=service.id,
            name=service.name,
            description=service.description,
            base_price=service.base_price,
            license_type=service.license_type.value,
            support_level=service.support_level.value,
            max_users=service.max_users,
            validity_years=service.validity_years,
            image_url=service.image_url,
            created_at=service.created_at,
            updated_at=service.updated_at,
        )
