"""
Request line repository port (interface).

Every write is scoped to a single (request, service) row and guarded by
the owning request's status where the lifecycle demands it.
"""
import uuid
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from core.domain.value_objects import PricingStatus, RequestStatus
from quotations.domain.request_line import RequestLine


class RequestLineRepository(ABC):
    """Abstract repository for RequestLine entities."""

    @abstractmethod
    async def add_to_draft(
        self, request_id: uuid.UUID, service_id: uuid.UUID
    ) -> Tuple[Optional[RequestLine], bool]:
        """
        Add a service to a draft request unless it is already present.

        Args:
            request_id: Request UUID
            service_id: Catalog entry UUID

        Returns:
            Tuple of (line, created). Line is None if the request is not a draft.
        """
        pass

    @abstractmethod
    async def find(self, request_id: uuid.UUID, service_id: uuid.UUID) -> Optional[RequestLine]:
        """Find the line for a (request, service) pair."""
        pass

    @abstractmethod
    async def find_by_request(self, request_id: uuid.UUID) -> List[RequestLine]:
        """List the lines of a request in insertion order."""
        pass

    @abstractmethod
    async def count(self, request_id: uuid.UUID) -> int:
        """Count the lines of a request."""
        pass

    @abstractmethod
    async def count_priced(self, request_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, int]:
        """
        Count lines with a positive sub-total per request.

        Lines whose catalog entry was soft-deleted are not counted.
        """
        pass

    @abstractmethod
    async def remove_from_draft(self, request_id: uuid.UUID, service_id: uuid.UUID) -> bool:
        """
        Remove a line while the request is a draft.

        Returns:
            True if a line was removed
        """
        pass

    @abstractmethod
    async def update_coefficient(
        self,
        request_id: uuid.UUID,
        service_id: uuid.UUID,
        coefficient: Decimal,
        allowed_statuses: Iterable[RequestStatus],
    ) -> bool:
        """
        Change a line's support coefficient if the request is in an allowed status.

        Returns:
            True if a line was updated
        """
        pass

    @abstractmethod
    async def set_sub_total(
        self,
        request_id: uuid.UUID,
        service_id: uuid.UUID,
        sub_total: Decimal,
        pricing_status: PricingStatus,
    ) -> bool:
        """
        Write one line's sub-total without touching any other line.

        Returns:
            True if the line exists
        """
        pass

    @abstractmethod
    async def mark_pricing_status(
        self,
        request_id: uuid.UUID,
        service_id: uuid.UUID,
        pricing_status: PricingStatus,
    ) -> bool:
        """
        Record the pricing state of a line.

        Returns:
            True if the line exists
        """
        pass

    @abstractmethod
    async def find_awaiting_pricing(
        self, request_id: Optional[uuid.UUID] = None
    ) -> List[RequestLine]:
        """
        Lines of completed requests that are still pending or failed.

        Args:
            request_id: Restrict to one request

        Returns:
            List of RequestLine entities
        """
        pass
