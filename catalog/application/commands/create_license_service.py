"""
CreateLicenseServiceCommand.

Command to add a license service to the catalog.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from core.domain.value_objects import Actor


@dataclass
class CreateLicenseServiceCommand:
    """Command to create a catalog entry (moderator-only)."""

    actor: Actor
    name: str
    base_price: Decimal
    license_type: str
    description: str = ""
    support_level: str = "standard"
    max_users: Optional[int] = None
    validity_years: int = 1
    image_url: Optional[str] = None
