"""
LicenseCalculationRequest aggregate root.

Holds the lifecycle state machine and the per-state field mutability
rules. Every transition returns a new instance; persistence decides
whether it wins against concurrent writers.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, FrozenSet, Iterable, Optional

from core.domain.exceptions import (
    InvalidStateError,
    InvalidStateTransitionError,
    PreconditionFailedError,
)
from core.domain.value_objects import RequestStatus, UsageParameters

TRANSITIONS: Dict[RequestStatus, FrozenSet[RequestStatus]] = {
    RequestStatus.DRAFT: frozenset({RequestStatus.FORMED, RequestStatus.DELETED}),
    RequestStatus.FORMED: frozenset({RequestStatus.COMPLETED, RequestStatus.REJECTED}),
    RequestStatus.COMPLETED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.DELETED: frozenset(),
}

LINE_EDITABLE = frozenset({RequestStatus.DRAFT})
COEFFICIENT_EDITABLE = frozenset({RequestStatus.DRAFT, RequestStatus.FORMED})


@dataclass(frozen=True)
class LicenseCalculationRequest:
    """
    License calculation request entity.

    Owned by one creator. The total cost is derived from the lines and
    is only written by the recalculation engine.
    """

    id: uuid.UUID
    creator_id: int
    status: RequestStatus
    parameters: UsageParameters
    total_cost: Decimal
    created_at: datetime
    moderator_id: Optional[int] = None
    formatted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate request entity."""
        if self.creator_id is None:
            raise ValueError("Creator ID is required")
        if self.total_cost < 0:
            raise ValueError("Total cost cannot be negative")

    @classmethod
    def create_draft(
        cls, creator_id: int, request_id: Optional[uuid.UUID] = None
    ) -> "LicenseCalculationRequest":
        """
        Create a new draft request.

        Args:
            creator_id: Owner user ID
            request_id: Optional UUID (generated if not provided)

        Returns:
            Draft LicenseCalculationRequest
        """
        return cls(
            id=request_id or uuid.uuid4(),
            creator_id=creator_id,
            status=RequestStatus.DRAFT,
            parameters=UsageParameters(),
            total_cost=Decimal("0"),
            created_at=datetime.now(timezone.utc),
        )

    @property
    def users(self) -> int:
        return self.parameters.users

    @property
    def cores(self) -> int:
        return self.parameters.cores

    @property
    def period(self) -> int:
        return self.parameters.period

    def is_owned_by(self, user_id: int) -> bool:
        """Check whether the user created this request."""
        return self.creator_id == user_id

    def can_transition_to(self, target: RequestStatus) -> bool:
        """Check whether a transition to the target status is legal."""
        return target in TRANSITIONS[self.status]

    def ensure_status(self, allowed: Iterable[RequestStatus], operation: str) -> None:
        """
        Ensure the request is in one of the allowed statuses.

        Raises:
            InvalidStateError: If the current status is not allowed
        """
        allowed = frozenset(allowed)
        if self.status not in allowed:
            expected = ", ".join(sorted(status.value for status in allowed))
            raise InvalidStateError(
                f"Cannot {operation}: request is {self.status.value}, expected {expected}"
            )

    def ensure_lines_editable(self) -> None:
        """Lines can be added or removed only while the request is a draft."""
        self.ensure_status(LINE_EDITABLE, "change request lines")

    def ensure_coefficient_editable(self) -> None:
        """Support coefficients can change while the request is draft or formed."""
        self.ensure_status(COEFFICIENT_EDITABLE, "change support coefficient")

    def _transition(self, target: RequestStatus, **changes) -> "LicenseCalculationRequest":
        if not self.can_transition_to(target):
            raise InvalidStateTransitionError(
                f"Cannot move request from {self.status.value} to {target.value}"
            )
        return replace(self, status=target, **changes)

    def update_parameters(
        self,
        users: Optional[int] = None,
        cores: Optional[int] = None,
        period: Optional[int] = None,
    ) -> "LicenseCalculationRequest":
        """
        Create a new instance with the provided usage parameters.

        Only legal in draft. None means "not provided".

        Raises:
            InvalidStateError: If the request is not a draft
            ValidationFailedError: If a provided value is out of range
        """
        self.ensure_status(LINE_EDITABLE, "update usage parameters")
        return replace(
            self,
            parameters=self.parameters.replace(users=users, cores=cores, period=period),
        )

    def format(
        self, line_count: int, now: Optional[datetime] = None
    ) -> "LicenseCalculationRequest":
        """
        Submit the draft for moderation.

        Args:
            line_count: Number of lines currently on the request
            now: Timestamp to stamp (defaults to now, UTC)

        Returns:
            New LicenseCalculationRequest in formed status

        Raises:
            InvalidStateTransitionError: If the request is not a draft
            PreconditionFailedError: If a precondition is not met
        """
        if not self.can_transition_to(RequestStatus.FORMED):
            raise InvalidStateTransitionError(
                f"Only draft requests can be formed, request is {self.status.value}"
            )
        if line_count < 1:
            raise PreconditionFailedError("Request must contain at least one service")
        if not self.parameters.is_billable:
            raise PreconditionFailedError("Users or cores must be greater than zero")
        if self.parameters.period < 1:
            raise PreconditionFailedError("Period must be at least 1")

        return self._transition(
            RequestStatus.FORMED,
            formatted_at=now or datetime.now(timezone.utc),
        )

    def complete(
        self, moderator_id: int, now: Optional[datetime] = None
    ) -> "LicenseCalculationRequest":
        """
        Approve a formed request. Sub-totals and total restart from zero.

        Raises:
            InvalidStateTransitionError: If the request is not formed
        """
        return self._transition(
            RequestStatus.COMPLETED,
            moderator_id=moderator_id,
            completed_at=now or datetime.now(timezone.utc),
            total_cost=Decimal("0"),
        )

    def reject(
        self, moderator_id: int, now: Optional[datetime] = None
    ) -> "LicenseCalculationRequest":
        """
        Reject a formed request.

        Raises:
            InvalidStateTransitionError: If the request is not formed
        """
        return self._transition(
            RequestStatus.REJECTED,
            moderator_id=moderator_id,
            completed_at=now or datetime.now(timezone.utc),
        )

    def delete(self) -> "LicenseCalculationRequest":
        """
        Soft-delete a draft request.

        Raises:
            InvalidStateTransitionError: If the request is not a draft
        """
        return self._transition(RequestStatus.DELETED)
