"""
Request access rules.

Buyers reach only their own requests. Moderators reach every request,
but draft editing stays with the creator.
"""
import uuid
from typing import Optional

from catalog.ports.license_service_repository import LicenseServiceRepository
from core.domain.exceptions import PermissionDeniedError, RequestNotFoundError
from core.domain.value_objects import Actor
from quotations.application.dto.calculation_request_dto import (
    CalculationRequestDTO,
    RequestLineDTO,
)
from quotations.domain.calculation_request import LicenseCalculationRequest
from quotations.ports.calculation_request_repository import CalculationRequestRepository
from quotations.ports.request_line_repository import RequestLineRepository


async def load_request_for(
    actor: Actor,
    request_id: uuid.UUID,
    request_repository: CalculationRequestRepository,
    owner_only_operation: Optional[str] = None,
) -> LicenseCalculationRequest:
    """
    Load a non-deleted request visible to the actor.

    Args:
        actor: Caller identity
        request_id: Request UUID
        request_repository: Request repository
        owner_only_operation: If set, only the creator may perform this operation

    Raises:
        RequestNotFoundError: If the request is missing, deleted or not visible
        PermissionDeniedError: If a moderator attempts a creator-only operation
    """
    request = await request_repository.find_by_id(request_id)
    if request is None:
        raise RequestNotFoundError(f"Request {request_id} not found")
    if request.is_owned_by(actor.user_id):
        return request
    if not actor.is_moderator:
        raise RequestNotFoundError(f"Request {request_id} not found")
    if owner_only_operation:
        raise PermissionDeniedError(f"Only the creator can {owner_only_operation}")
    return request


async def assemble_detail(
    request: LicenseCalculationRequest,
    line_repository: RequestLineRepository,
    service_repository: LicenseServiceRepository,
) -> CalculationRequestDTO:
    """
    Render a request with its lines joined to live catalog entries.

    Lines whose catalog entry was soft-deleted are left out.
    """
    lines = await line_repository.find_by_request(request.id)
    services = await service_repository.find_by_ids([line.service_id for line in lines])

    rendered = [
        RequestLineDTO.from_entities(line, services[line.service_id])
        for line in lines
        if line.service_id in services
    ]
    ready_count = sum(1 for line in rendered if line.sub_total > 0)
    return CalculationRequestDTO.from_entity(request, lines=rendered, ready_count=ready_count)


async def reload_detail(
    request_id: uuid.UUID,
    request_repository: CalculationRequestRepository,
    line_repository: RequestLineRepository,
    service_repository: LicenseServiceRepository,
) -> CalculationRequestDTO:
    """Re-read a request after a write and render it."""
    request = await request_repository.find_by_id(request_id)
    if request is None:
        raise RequestNotFoundError(f"Request {request_id} not found")
    return await assemble_detail(request, line_repository, service_repository)
