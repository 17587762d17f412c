"""
Calculation request repository port (interface).

This defines the contract for request persistence operations.
Implementations are in the infrastructure layer.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from core.domain.value_objects import PricingStatus, RequestStatus
from quotations.domain.calculation_request import LicenseCalculationRequest


class CalculationRequestRepository(ABC):
    """
    Abstract repository for LicenseCalculationRequest aggregates.

    Deleted requests are invisible to every read.
    """

    @abstractmethod
    async def get_or_create_draft(
        self, creator_id: int
    ) -> Tuple[LicenseCalculationRequest, bool]:
        """
        Return the creator's draft, creating one if none exists.

        Args:
            creator_id: Owner user ID

        Returns:
            Tuple of (draft request, created flag)
        """
        pass

    @abstractmethod
    async def find_by_id(self, request_id: uuid.UUID) -> Optional[LicenseCalculationRequest]:
        """
        Find a non-deleted request by ID.

        Args:
            request_id: Request UUID

        Returns:
            LicenseCalculationRequest or None if missing or deleted
        """
        pass

    @abstractmethod
    async def find_draft(self, creator_id: int) -> Optional[LicenseCalculationRequest]:
        """
        Find the creator's current draft.

        Args:
            creator_id: Owner user ID

        Returns:
            Draft request or None
        """
        pass

    @abstractmethod
    async def list_requests(
        self,
        creator_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[LicenseCalculationRequest]:
        """
        List non-deleted requests, newest first.

        Args:
            creator_id: Restrict to one creator
            status: Restrict to one status
            date_from: Earliest formatted date (inclusive)
            date_to: Latest formatted date (inclusive)

        Returns:
            List of requests
        """
        pass

    @abstractmethod
    async def update_parameters(
        self,
        request: LicenseCalculationRequest,
        line_prices: Optional[Dict[uuid.UUID, Tuple[Decimal, PricingStatus]]] = None,
    ) -> bool:
        """
        Persist usage parameters if the request is still a draft.

        Parameters, line prices and the re-summed total are written atomically.

        Args:
            request: Request carrying the new parameters
            line_prices: New (sub-total, pricing status) per service ID

        Returns:
            True if written, False if the request is no longer a draft
        """
        pass

    @abstractmethod
    async def apply_transition(
        self,
        request: LicenseCalculationRequest,
        expected_status: RequestStatus,
        reset_lines_to: Optional[PricingStatus] = None,
    ) -> bool:
        """
        Persist a status transition with compare-and-set semantics.

        Args:
            request: Request in its new state
            expected_status: Status the stored row must still have
            reset_lines_to: If given, zero every line sub-total and the total
                and set this pricing status, in the same transaction

        Returns:
            True if the transition was applied, False if the stored status changed
        """
        pass

    @abstractmethod
    async def recalculate_total(self, request_id: uuid.UUID) -> Decimal:
        """
        Set total cost to the sum of sub-totals of lines with a live catalog entry.

        Args:
            request_id: Request UUID

        Returns:
            New total cost
        """
        pass
