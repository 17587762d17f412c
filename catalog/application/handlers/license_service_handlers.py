"""
Catalog command handlers.

Create, sparse-update and soft-delete catalog entries. All three
are moderator-only.
"""
import logging

from catalog.application.commands.create_license_service import (
    CreateLicenseServiceCommand,
)
from catalog.application.commands.delete_license_service import (
    DeleteLicenseServiceCommand,
)
from catalog.application.commands.update_license_service import (
    UpdateLicenseServiceCommand,
)
from catalog.application.dto.license_service_dto import LicenseServiceDTO
from catalog.domain.events import (
    LicenseServiceCreated,
    LicenseServiceDeleted,
    LicenseServiceUpdated,
)
from catalog.domain.license_service import LicenseService
from catalog.ports.license_service_repository import LicenseServiceRepository
from core.domain.exceptions import LicenseServiceNotFoundError
from core.infrastructure.events import event_bus

logger = logging.getLogger(__name__)


class CreateLicenseServiceHandler:
    """Handler for CreateLicenseServiceCommand."""

    def __init__(self, service_repository: LicenseServiceRepository):
        """Initialize handler with repository."""
        self.service_repository = service_repository

    async def handle(self, command: CreateLicenseServiceCommand) -> LicenseServiceDTO:
        """
        Handle create license service command.

        Args:
            command: CreateLicenseServiceCommand

        Returns:
            Created LicenseServiceDTO

        Raises:
            PermissionDeniedError: If the actor is not a moderator
            ValidationFailedError: If a field is invalid
        """
        command.actor.require_moderator("create catalog entries")

        service = LicenseService.create(
            name=command.name,
            base_price=command.base_price,
            license_type=command.license_type,
            description=command.description,
            support_level=command.support_level,
            max_users=command.max_users,
            validity_years=command.validity_years,
            image_url=command.image_url,
        )
        saved = await self.service_repository.save(service)

        logger.info(
            "License service created",
            extra={"service_id": str(saved.id), "license_type": saved.license_type.value},
        )
        await event_bus.publish(
            LicenseServiceCreated(
                service_id=saved.id,
                name=saved.name,
                license_type=saved.license_type.value,
            )
        )
        return LicenseServiceDTO.from_entity(saved)


class UpdateLicenseServiceHandler:
    """Handler for UpdateLicenseServiceCommand."""

    def __init__(self, service_repository: LicenseServiceRepository):
        """Initialize handler with repository."""
        self.service_repository = service_repository

    async def handle(self, command: UpdateLicenseServiceCommand) -> LicenseServiceDTO:
        """
        Handle update license service command.

        Args:
            command: UpdateLicenseServiceCommand

        Returns:
            Updated LicenseServiceDTO

        Raises:
            PermissionDeniedError: If the actor is not a moderator
            LicenseServiceNotFoundError: If the entry is missing or deleted
        """
        command.actor.require_moderator("edit catalog entries")

        service = await self.service_repository.find_by_id(command.service_id)
        if not service:
            raise LicenseServiceNotFoundError(
                f"License service {command.service_id} not found"
            )

        changes = command.provided_fields()
        if not changes:
            return LicenseServiceDTO.from_entity(service)

        saved = await self.service_repository.save(service.update(**changes))
        await event_bus.publish(
            LicenseServiceUpdated(service_id=saved.id, changed_fields=sorted(changes))
        )
        return LicenseServiceDTO.from_entity(saved)


class DeleteLicenseServiceHandler:
    """Handler for DeleteLicenseServiceCommand."""

    def __init__(self, service_repository: LicenseServiceRepository):
        """Initialize handler with repository."""
        self.service_repository = service_repository

    async def handle(self, command: DeleteLicenseServiceCommand) -> None:
        """
        Handle delete license service command.

        Raises:
            PermissionDeniedError: If the actor is not a moderator
            LicenseServiceNotFoundError: If the entry is missing or already deleted
        """
        command.actor.require_moderator("delete catalog entries")

        deleted = await self.service_repository.soft_delete(command.service_id)
        if not deleted:
            raise LicenseServiceNotFoundError(
                f"License service {command.service_id} not found or already deleted"
            )

        await event_bus.publish(LicenseServiceDeleted(service_id=command.service_id))
