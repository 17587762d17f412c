"""
LicenseService domain entity.

A catalog entry describing a license that can be added to a
calculation request. It is independent of infrastructure.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from core.domain.exceptions import ValidationFailedError
from core.domain.value_objects import LicenseType, SupportLevel

DEFAULT_IMAGE = "rectangle-2-6.png"


def _to_license_type(value) -> LicenseType:
    """Coerce a license type, rejecting unknown values."""
    try:
        return LicenseType(value)
    except ValueError as exc:
        raise ValidationFailedError(f"Unknown license type: {value}") from exc


def _to_price(value) -> Decimal:
    """Coerce a price to Decimal."""
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationFailedError(f"Invalid base price: {value}") from exc


@dataclass(frozen=True)
class LicenseService:
    """
    LicenseService domain entity.

    Read-mostly catalog entry. Deleting it only flips a flag so lines
    that reference it keep a valid reference.
    """

    id: uuid.UUID
    name: str
    description: str
    base_price: Decimal
    license_type: LicenseType
    support_level: SupportLevel
    max_users: Optional[int]
    validity_years: int
    image_url: Optional[str]
    is_deleted: bool
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        """Validate license service entity."""
        if not self.name or len(self.name.strip()) == 0:
            raise ValidationFailedError("Service name cannot be empty")
        if len(self.name) > 100:
            raise ValidationFailedError("Service name too long")
        if self.base_price <= 0:
            raise ValidationFailedError("Base price must be greater than zero")
        if self.max_users is not None and self.max_users < 1:
            raise ValidationFailedError("Max users must be at least 1")
        if self.validity_years < 1:
            raise ValidationFailedError("Validity must be at least 1 year")

    @classmethod
    def create(
        cls,
        name: str,
        base_price,
        license_type: LicenseType,
        description: str = "",
        support_level: SupportLevel = SupportLevel.STANDARD,
        max_users: Optional[int] = None,
        validity_years: int = 1,
        image_url: Optional[str] = None,
        service_id: Optional[uuid.UUID] = None,
    ) -> "LicenseService":
        """
        Create a new LicenseService entity.

        Args:
            name: Display name
            base_price: Price per unit of the license type
            license_type: Billing basis
            description: Free-form description
            support_level: Support tier
            max_users: Optional user cap
            validity_years: License validity in years
            image_url: Optional image reference
            service_id: Optional UUID (generated if not provided)

        Returns:
            LicenseService entity instance
        """
        now = datetime.now(timezone.utc)
        return cls(
            id=service_id or uuid.uuid4(),
            name=(name or "").strip(),
            description=description or "",
            base_price=_to_price(base_price),
            license_type=_to_license_type(license_type),
            support_level=SupportLevel(support_level),
            max_users=max_users,
            validity_years=validity_years,
            image_url=image_url or DEFAULT_IMAGE,
            is_deleted=False,
            created_at=now,
            updated_at=now,
        )

    def update(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        base_price=None,
        license_type: Optional[LicenseType] = None,
        support_level: Optional[SupportLevel] = None,
        max_users: Optional[int] = None,
        validity_years: Optional[int] = None,
        image_url: Optional[str] = None,
    ) -> "LicenseService":
        """
        Create a new instance with only the provided fields changed.

        None means "not provided". Provided values are validated, so an
        empty name or a non-positive price is rejected rather than ignored.

        Returns:
            New LicenseService instance
        """
        if self.is_deleted:
            raise ValidationFailedError("Cannot update a deleted service")

        changes = {}
        if name is not None:
            changes["name"] = name.strip()
        if description is not None:
            changes["description"] = description
        if base_price is not None:
            changes["base_price"] = _to_price(base_price)
        if license_type is not None:
            changes["license_type"] = _to_license_type(license_type)
        if support_level is not None:
            changes["support_level"] = SupportLevel(support_level)
        if max_users is not None:
            changes["max_users"] = max_users
        if validity_years is not None:
            changes["validity_years"] = validity_years
        if image_url is not None:
            changes["image_url"] = image_url

        if not changes:
            return self
        return replace(self, updated_at=datetime.now(timezone.utc), **changes)

    def mark_deleted(self) -> "LicenseService":
        """
        Create a new instance flagged as deleted.

        Returns:
            New LicenseService instance with is_deleted set
        """
        return replace(self, is_deleted=True, updated_at=datetime.now(timezone.utc))
