"""
UpdateLicenseServiceCommand.

Sparse update of a catalog entry.
"""
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from core.domain.value_objects import Actor


@dataclass
class UpdateLicenseServiceCommand:
    """
    Command to update selected fields of a catalog entry.

    Fields left as None are not provided and keep their current value.
    """

    actor: Actor
    service_id: uuid.UUID
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Optional[Decimal] = None
    license_type: Optional[str] = None
    support_level: Optional[str] = None
    max_users: Optional[int] = None
    validity_years: Optional[int] = None
    image_url: Optional[str] = None

    def provided_fields(self) -> dict:
        """Return the fields that were explicitly provided."""
        names = (
            "name",
            "description",
            "base_price",
            "license_type",
            "support_level",
            "max_users",
            "validity_years",
            "image_url",
        )
        return {
            name: getattr(self, name)
            for name in names
            if getattr(self, name) is not None
        }
