"""
Pytest configuration and shared fixtures.
"""

from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync

from catalog.domain.license_service import LicenseService
from catalog.infrastructure.repositories.django_license_service_repository import (
    DjangoLicenseServiceRepository,
)
from core.domain.value_objects import Actor, LicenseType, Role
from quotations.application.services.recalculation_service import RecalculationService
from quotations.infrastructure.repositories.django_calculation_request_repository import (
    DjangoCalculationRequestRepository,
)
from quotations.infrastructure.repositories.django_request_line_repository import (
    DjangoRequestLineRepository,
)


@pytest.fixture
def service_repository():
    """Fixture for LicenseServiceRepository."""
    return DjangoLicenseServiceRepository()


@pytest.fixture
def request_repository():
    """Fixture for CalculationRequestRepository."""
    return DjangoCalculationRequestRepository()


@pytest.fixture
def line_repository():
    """Fixture for RequestLineRepository."""
    return DjangoRequestLineRepository()


@pytest.fixture
def recalculation_service(request_repository, line_repository, service_repository):
    """Fixture for RecalculationService."""
    return RecalculationService(request_repository, line_repository, service_repository)


@pytest.fixture
def buyer(db, django_user_model):
    """A regular buyer."""
    return django_user_model.objects.create_user(username="buyer", password="secret")


@pytest.fixture
def other_buyer(db, django_user_model):
    """A second buyer who must not see the first buyer's requests."""
    return django_user_model.objects.create_user(username="other", password="secret")


@pytest.fixture
def moderator(db, django_user_model):
    """A staff user acting as moderator."""
    return django_user_model.objects.create_user(
        username="moderator", password="secret", is_staff=True
    )


@pytest.fixture
def buyer_actor(buyer):
    return Actor.from_user(buyer)


@pytest.fixture
def other_actor(other_buyer):
    return Actor.from_user(other_buyer)


@pytest.fixture
def moderator_actor(moderator):
    return Actor(user_id=moderator.pk, role=Role.MODERATOR)


@pytest.fixture
def sample_service():
    """Fixture for an unsaved per-user LicenseService entity."""
    return LicenseService.create(
        name="User licenses",
        base_price=Decimal("16100.00"),
        license_type=LicenseType.PER_USER,
    )


@pytest.fixture
def make_service(db, service_repository):
    """Factory saving catalog entries in the database."""

    def _make(name="User licenses", base_price="16100.00", license_type=LicenseType.PER_USER):
        service = LicenseService.create(
            name=name,
            base_price=Decimal(base_price),
            license_type=license_type,
        )
        return async_to_sync(service_repository.save)(service)

    return _make


@pytest.fixture
def per_user_service(make_service):
    return make_service()


@pytest.fixture
def per_core_service(make_service):
    return make_service(
        name="Server licenses", base_price="276200.00", license_type=LicenseType.PER_CORE
    )


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def buyer_client(buyer):
    """API client authenticated as the buyer."""
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=buyer)
    return client


@pytest.fixture
def other_client(other_buyer):
    """API client authenticated as the other buyer."""
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=other_buyer)
    return client


@pytest.fixture
def moderator_client(moderator):
    """API client authenticated as the moderator."""
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=moderator)
    return client
