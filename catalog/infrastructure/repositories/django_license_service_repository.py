"""
Django implementation of LicenseServiceRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import uuid
from typing import Dict, Iterable, List, Optional

from asgiref.sync import sync_to_async

from catalog.domain.license_service import LicenseService
from catalog.infrastructure.models import LicenseService as LicenseServiceModel
from catalog.ports.license_service_repository import LicenseServiceRepository
from core.domain.value_objects import LicenseType, SupportLevel


class DjangoLicenseServiceRepository(LicenseServiceRepository):
    """
    Django ORM implementation of LicenseServiceRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Hides soft-deleted rows from every read
    """

    def _live(self):
        """Queryset of non-deleted entries."""
        return LicenseServiceModel.objects.filter(is_deleted=False)

    def _to_domain(self, model: LicenseServiceModel) -> LicenseService:
        """
        Convert Django model to domain entity.

        Args:
            model: Django LicenseService model

        Returns:
            LicenseService domain entity
        """
        return LicenseService(
            id=model.id,
            name=model.name,
            description=model.description,
            base_price=model.base_price,
            license_type=LicenseType(model.license_type),
            support_level=SupportLevel(model.support_level),
            max_users=model.max_users,
            validity_years=model.validity_years,
            image_url=model.image_url,
            is_deleted=model.is_deleted,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, service: LicenseService) -> LicenseServiceModel:
        """
        Convert domain entity to Django model.

        Args:
            service: LicenseService domain entity

        Returns:
            Django LicenseService model (unsaved changes applied)
        """
        fields = {
            "name": service.name,
            "description": service.description,
            "base_price": service.base_price,
            "license_type": service.license_type.value,
            "support_level": service.support_level.value,
            "max_users": service.max_users,
            "validity_years": service.validity_years,
            "image_url": service.image_url,
            "is_deleted": service.is_deleted,
        }
        try:
            model = LicenseServiceModel.objects.get(id=service.id)
        except LicenseServiceModel.DoesNotExist:
            return LicenseServiceModel(id=service.id, **fields)
        for name, value in fields.items():
            setattr(model, name, value)
        return model

    @sync_to_async
    def save(self, service: LicenseService) -> LicenseService:
        """
        Save a catalog entry.

        Args:
            service: LicenseService entity to save

        Returns:
            Saved LicenseService entity
        """
        model = self._to_model(service)
        model.save()
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(self, service_id: uuid.UUID) -> Optional[LicenseService]:
        """
        Find a live catalog entry by ID.

        Args:
            service_id: LicenseService UUID

        Returns:
            LicenseService entity or None if missing or deleted
        """
        try:
            return self._to_domain(self._live().get(id=service_id))
        except LicenseServiceModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_ids(
        self, service_ids: Iterable[uuid.UUID]
    ) -> Dict[uuid.UUID, LicenseService]:
        """
        Find live catalog entries by ID.

        Args:
            service_ids: LicenseService UUIDs

        Returns:
            Mapping of ID to entity, missing or deleted IDs omitted
        """
        models = self._live().filter(id__in=list(service_ids))
        return {model.id: self._to_domain(model) for model in models}

    @sync_to_async
    def list_active(self, query: Optional[str] = None) -> List[LicenseService]:
        """
        List live catalog entries, optionally filtered by name.

        Args:
            query: Case-insensitive name substring

        Returns:
            List of LicenseService entities ordered by name
        """
        queryset = self._live()
        if query:
            queryset = queryset.filter(name__icontains=query)
        return [self._to_domain(model) for model in queryset.order_by("name")]

    @sync_to_async
    def soft_delete(self, service_id: uuid.UUID) -> bool:
        """
        Flag a live catalog entry as deleted.

        Args:
            service_id: LicenseService UUID

        Returns:
            True if an entry was deleted, False if it was missing or already deleted
        """
        updated = self._live().filter(id=service_id).update(is_deleted=True)
        return updated == 1
