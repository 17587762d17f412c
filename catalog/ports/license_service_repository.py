"""
LicenseService repository port (interface).

This defines the contract for catalog persistence operations.
Every read excludes soft-deleted entries.
"""
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from catalog.domain.license_service import LicenseService


class LicenseServiceRepository(ABC):
    """
    Abstract repository for LicenseService entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def save(self, service: LicenseService) -> LicenseService:
        """
        Save a catalog entry.

        Args:
            service: LicenseService entity to save

        Returns:
            Saved LicenseService entity
        """
        pass

    @abstractmethod
    async def find_by_id(self, service_id: uuid.UUID) -> Optional[LicenseService]:
        """
        Find a live catalog entry by ID.

        Args:
            service_id: LicenseService UUID

        Returns:
            LicenseService entity or None if missing or deleted
        """
        pass

    @abstractmethod
    async def find_by_ids(
        self, service_ids: Iterable[uuid.UUID]
    ) -> Dict[uuid.UUID, LicenseService]:
        """
        Find live catalog entries by ID.

        Args:
            service_ids: LicenseService UUIDs

        Returns:
            Mapping of ID to entity, missing or deleted IDs omitted
        """
        pass

    @abstractmethod
    async def list_active(self, query: Optional[str] = None) -> List[LicenseService]:
        """
        List live catalog entries, optionally filtered by name.

        Args:
            query: Case-insensitive name substring

        Returns:
            List of LicenseService entities ordered by name
        """
        pass

    @abstractmethod
    async def soft_delete(self, service_id: uuid.UUID) -> bool:
        """
        Flag a live catalog entry as deleted.

        Args:
            service_id: LicenseService UUID

        Returns:
            True if an entry was deleted, False if it was missing or already deleted
        """
        pass
