"""
Catalog query handlers.
"""
from typing import List

from catalog.application.dto.license_service_dto import LicenseServiceDTO
from catalog.application.queries.get_license_service import GetLicenseServiceQuery
from catalog.application.queries.list_license_services import ListLicenseServicesQuery
from catalog.ports.license_service_repository import LicenseServiceRepository
from core.domain.exceptions import LicenseServiceNotFoundError


class ListLicenseServicesHandler:
    """Handler for ListLicenseServicesQuery."""

    def __init__(self, service_repository: LicenseServiceRepository):
        """Initialize handler with repository."""
        self.service_repository = service_repository

    async def handle(self, query: ListLicenseServicesQuery) -> List[LicenseServiceDTO]:
        """List live catalog entries, searching by name when a query is given."""
        search = query.query.strip() if query.query else None
        services = await self.service_repository.list_active(search or None)
        return [LicenseServiceDTO.from_entity(service) for service in services]


class GetLicenseServiceHandler:
    """Handler for GetLicenseServiceQuery."""

    def __init__(self, service_repository: LicenseServiceRepository):
        """Initialize handler with repository."""
        self.service_repository = service_repository

    async def handle(self, query: GetLicenseServiceQuery) -> LicenseServiceDTO:
        """
        Fetch one live catalog entry.

        Raises:
            LicenseServiceNotFoundError: If the entry is missing or deleted
        """
        service = await self.service_repository.find_by_id(query.service_id)
        if not service:
            raise LicenseServiceNotFoundError(f"License service {query.service_id} not found")
        return LicenseServiceDTO.from_entity(service)
