"""
Unit tests for LicenseService entity.
"""
from decimal import Decimal

import pytest

from catalog.domain.license_service import DEFAULT_IMAGE, LicenseService
from core.domain.exceptions import ValidationFailedError
from core.domain.value_objects import LicenseType, SupportLevel


class TestLicenseServiceEntity:
    """Tests for LicenseService entity."""

    def test_create_defaults(self, sample_service):
        """Test defaults applied on creation."""
        assert sample_service.license_type == LicenseType.PER_USER
        assert sample_service.support_level == SupportLevel.STANDARD
        assert sample_service.validity_years == 1
        assert sample_service.image_url == DEFAULT_IMAGE
        assert sample_service.is_deleted is False

    def test_create_accepts_string_license_type(self):
        service = LicenseService.create(
            name="Corporate subscription", base_price="1500000", license_type="subscription"
        )
        assert service.license_type == LicenseType.SUBSCRIPTION
        assert service.base_price == Decimal("1500000")

    def test_unknown_license_type_rejected(self):
        with pytest.raises(ValidationFailedError):
            LicenseService.create(name="Odd", base_price="10", license_type="per_seat")

    @pytest.mark.parametrize("price", ["0", "-5"])
    def test_non_positive_price_rejected(self, price):
        """Test base price must be greater than zero."""
        with pytest.raises(ValidationFailedError):
            LicenseService.create(name="Cheap", base_price=price, license_type="per_user")

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationFailedError):
            LicenseService.create(name="   ", base_price="10", license_type="per_user")

    def test_update_changes_only_provided_fields(self, sample_service):
        """Test sparse update semantics."""
        updated = sample_service.update(base_price="17000")
        assert updated.base_price == Decimal("17000")
        assert updated.name == sample_service.name
        assert updated.license_type == sample_service.license_type

    def test_update_without_changes_returns_same_instance(self, sample_service):
        assert sample_service.update() is sample_service

    def test_update_rejects_empty_name(self, sample_service):
        """Test a provided empty name is rejected rather than ignored."""
        with pytest.raises(ValidationFailedError):
            sample_service.update(name="")

    def test_deleted_service_cannot_be_updated(self, sample_service):
        deleted = sample_service.mark_deleted()
        assert deleted.is_deleted
        with pytest.raises(ValidationFailedError):
            deleted.update(name="Renamed")
