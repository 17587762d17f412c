"""
Request query handlers.
"""
from typing import List

from catalog.ports.license_service_repository import LicenseServiceRepository
from quotations.application.dto.calculation_request_dto import (
    CalculationRequestDTO,
    CartDTO,
)
from quotations.application.queries.get_cart import GetCartQuery
from quotations.application.queries.get_request import GetRequestQuery
from quotations.application.queries.list_requests import ListRequestsQuery
from quotations.application.services.request_access import assemble_detail, load_request_for
from quotations.ports.calculation_request_repository import CalculationRequestRepository
from quotations.ports.request_line_repository import RequestLineRepository


class GetRequestHandler:
    """Handler for GetRequestQuery."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
        service_repository: LicenseServiceRepository,
    ):
        """Initialize handler with repositories."""
        self.request_repository = request_repository
        self.line_repository = line_repository
        self.service_repository = service_repository

    async def handle(self, query: GetRequestQuery) -> CalculationRequestDTO:
        """
        Handle get request query.

        Sub-totals are rendered as currently stored, zeros included
        while pricing is pending.

        Raises:
            RequestNotFoundError: If the request is not visible
        """
        request = await load_request_for(query.actor, query.request_id, self.request_repository)
        return await assemble_detail(request, self.line_repository, self.service_repository)


class ListRequestsHandler:
    """Handler for ListRequestsQuery."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
    ):
        """Initialize handler with repositories."""
        self.request_repository = request_repository
        self.line_repository = line_repository

    async def handle(self, query: ListRequestsQuery) -> List[CalculationRequestDTO]:
        """
        Handle list requests query.

        Moderators see every request; buyers see their own.
        """
        creator_id = None if query.actor.is_moderator else query.actor.user_id
        requests = await self.request_repository.list_requests(
            creator_id=creator_id,
            status=query.status,
            date_from=query.date_from,
            date_to=query.date_to,
        )
        if not requests:
            return []

        ready = await self.line_repository.count_priced([request.id for request in requests])
        return [
            CalculationRequestDTO.from_entity(request, ready_count=ready.get(request.id, 0))
            for request in requests
        ]


class GetCartHandler:
    """Handler for GetCartQuery."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
    ):
        """Initialize handler with repositories."""
        self.request_repository = request_repository
        self.line_repository = line_repository

    async def handle(self, query: GetCartQuery) -> CartDTO:
        """Return the actor's draft id and line count (None and 0 without a draft)."""
        draft = await self.request_repository.find_draft(query.actor.user_id)
        if not draft:
            return CartDTO(request_id=None, line_count=0)
        return CartDTO(
            request_id=draft.id,
            line_count=await self.line_repository.count(draft.id),
        )
