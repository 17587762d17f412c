"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from core.domain.exceptions import PermissionDeniedError, ValidationFailedError

MIN_SUPPORT_COEFFICIENT = Decimal("0.70")
MAX_SUPPORT_COEFFICIENT = Decimal("3.00")
CENT = Decimal("0.01")
# Largest amount the 14-digit money columns hold
MAX_MONEY = Decimal("999999999999.99")
MAX_USAGE_QUANTITY = 1_000_000


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


class RequestStatus(Enum):
    """Calculation request status."""

    DRAFT = "draft"
    FORMED = "formed"
    COMPLETED = "completed"
    REJECTED = "rejected"
    DELETED = "deleted"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class LicenseType(Enum):
    """How a catalog entry is billed."""

    PER_USER = "per_user"
    PER_CORE = "per_core"
    SUBSCRIPTION = "subscription"

    def __str__(self) -> str:
        """Return license type as string."""
        return self.value


class SupportLevel(Enum):
    """Support tier attached to a catalog entry."""

    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"

    def __str__(self) -> str:
        """Return support level as string."""
        return self.value


class PricingStatus(Enum):
    """Asynchronous pricing state of a request line."""

    NOT_REQUESTED = "not_requested"
    PENDING = "pending"
    PRICED = "priced"
    FAILED = "failed"

    def __str__(self) -> str:
        """Return pricing status as string."""
        return self.value


class Role(Enum):
    """Caller role."""

    BUYER = "buyer"
    MODERATOR = "moderator"
    ADMIN = "admin"

    def __str__(self) -> str:
        """Return role as string."""
        return self.value


@dataclass(frozen=True)
class Actor(ValueObject):
    """
    Request-scoped identity of the caller.

    Built once per HTTP request and passed into every handler.
    """

    user_id: int
    role: Role

    def __post_init__(self):
        """Validate actor."""
        if self.user_id is None:
            raise ValueError("Actor requires a user id")

    @property
    def is_moderator(self) -> bool:
        """Moderators and admins may act on any request."""
        return self.role in (Role.MODERATOR, Role.ADMIN)

    def require_moderator(self, operation: str) -> None:
        """
        Ensure the actor may perform a moderator-only operation.

        Raises:
            PermissionDeniedError: If the actor is a buyer
        """
        if not self.is_moderator:
            raise PermissionDeniedError(f"Only moderators can {operation}")

    @classmethod
    def from_user(cls, user) -> "Actor":
        """
        Build an actor from a Django user.

        Args:
            user: Authenticated Django user

        Returns:
            Actor with the role derived from the user's flags
        """
        if user.is_superuser:
            role = Role.ADMIN
        elif user.is_staff:
            role = Role.MODERATOR
        else:
            role = Role.BUYER
        return cls(user_id=user.pk, role=role)


@dataclass(frozen=True)
class UsageParameters(ValueObject):
    """Usage parameters of a calculation request."""

    users: int = 0
    cores: int = 0
    period: int = 1

    def __post_init__(self):
        """Validate usage parameters."""
        if self.users < 0:
            raise ValidationFailedError("Users cannot be negative")
        if self.cores < 0:
            raise ValidationFailedError("Cores cannot be negative")
        if self.period < 1:
            raise ValidationFailedError("Period must be at least 1")
        for field_name in ("users", "cores", "period"):
            if getattr(self, field_name) > MAX_USAGE_QUANTITY:
                raise ValidationFailedError(
                    f"{field_name.capitalize()} cannot exceed {MAX_USAGE_QUANTITY}"
                )

    def replace(
        self,
        users: Optional[int] = None,
        cores: Optional[int] = None,
        period: Optional[int] = None,
    ) -> "UsageParameters":
        """
        Return new parameters overriding only the provided values.

        Args:
            users: New user count or None to keep
            cores: New core count or None to keep
            period: New period or None to keep

        Returns:
            New UsageParameters instance
        """
        return UsageParameters(
            users=self.users if users is None else users,
            cores=self.cores if cores is None else cores,
            period=self.period if period is None else period,
        )

    @property
    def is_billable(self) -> bool:
        """At least one of users or cores must be set to form a request."""
        return self.users > 0 or self.cores > 0


@dataclass(frozen=True)
class SupportCoefficient(ValueObject):
    """Per-line support multiplier bounded to [0.7, 3.0]."""

    value: Decimal

    def __post_init__(self):
        """Validate coefficient range."""
        if not MIN_SUPPORT_COEFFICIENT <= self.value <= MAX_SUPPORT_COEFFICIENT:
            raise ValidationFailedError(
                f"Support coefficient must be between {MIN_SUPPORT_COEFFICIENT} "
                f"and {MAX_SUPPORT_COEFFICIENT}"
            )

    @classmethod
    def clamp(cls, raw) -> "SupportCoefficient":
        """
        Build a coefficient, clamping out-of-range input instead of rejecting it.

        Args:
            raw: Number, Decimal or numeric string

        Returns:
            SupportCoefficient within bounds
        """
        try:
            value = Decimal(str(raw))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationFailedError(f"Invalid support coefficient: {raw}") from exc
        if not value.is_finite():
            raise ValidationFailedError(f"Invalid support coefficient: {raw}")
        value = max(MIN_SUPPORT_COEFFICIENT, min(MAX_SUPPORT_COEFFICIENT, value))
        return cls(value=value.quantize(CENT, rounding=ROUND_HALF_UP))

    def __str__(self) -> str:
        """Return coefficient as string."""
        return str(self.value)
