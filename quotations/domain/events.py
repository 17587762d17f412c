"""
Quotation domain events.

Domain events represent something that happened to a calculation request.
"""

import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class RequestFormed(DomainEvent):
    """Event raised when a draft is submitted for moderation."""

    def __init__(
        self,
        request_id: uuid.UUID,
        creator_id: int,
        line_count: int,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize RequestFormed event.

        Args:
            request_id: Request UUID
            creator_id: Owner user ID
            line_count: Number of lines at submission
            occurred_at: When the event occurred
        """
        super().__init__(aggregate_id=str(request_id), occurred_at=occurred_at)
        self.request_id = request_id
        self.creator_id = creator_id
        self.line_count = line_count

    def payload(self):
        return {"creator_id": self.creator_id, "line_count": self.line_count}


class RequestCompleted(DomainEvent):
    """Event raised when a moderator completes a request."""

    def __init__(
        self,
        request_id: uuid.UUID,
        moderator_id: int,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize RequestCompleted event.

        Args:
            request_id: Request UUID
            moderator_id: Moderator user ID
            occurred_at: When the event occurred
        """
        super().__init__(aggregate_id=str(request_id), occurred_at=occurred_at)
        self.request_id = request_id
        self.moderator_id = moderator_id

    def payload(self):
        return {"moderator_id": self.moderator_id}


class RequestRejected(DomainEvent):
    """Event raised when a moderator rejects a request."""

    def __init__(
        self,
        request_id: uuid.UUID,
        moderator_id: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(request_id), occurred_at=occurred_at)
        self.request_id = request_id
        self.moderator_id = moderator_id

    def payload(self):
        return {"moderator_id": self.moderator_id}


class RequestDeleted(DomainEvent):
    """Event raised when a draft is soft-deleted."""

    def __init__(
        self,
        request_id: uuid.UUID,
        deleted_by: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(request_id), occurred_at=occurred_at)
        self.request_id = request_id
        self.deleted_by = deleted_by

    def payload(self):
        return {"deleted_by": self.deleted_by}
