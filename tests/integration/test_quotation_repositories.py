"""
Integration tests for quotation repositories.
"""
from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync

from core.domain.value_objects import PricingStatus, RequestStatus
from quotations.infrastructure.models import LicenseCalculationRequest, RequestLine


@pytest.mark.django_db
@pytest.mark.integration
class TestCalculationRequestRepository:
    """Tests for DjangoCalculationRequestRepository."""

    def test_single_draft_per_creator(self, request_repository, buyer):
        first, created = async_to_sync(request_repository.get_or_create_draft)(buyer.pk)
        second, created_again = async_to_sync(request_repository.get_or_create_draft)(buyer.pk)

        assert created is True
        assert created_again is False
        assert first.id == second.id
        assert LicenseCalculationRequest.objects.filter(creator=buyer).count() == 1

    def test_transition_is_compare_and_set(self, request_repository, buyer):
        """Test a transition written against a stale status changes nothing."""
        draft, _ = async_to_sync(request_repository.get_or_create_draft)(buyer.pk)
        deleted = draft.delete()

        assert async_to_sync(request_repository.apply_transition)(deleted, RequestStatus.DRAFT)
        assert not async_to_sync(request_repository.apply_transition)(
            deleted, RequestStatus.DRAFT
        )

    def test_deleted_requests_are_invisible(self, request_repository, buyer):
        draft, _ = async_to_sync(request_repository.get_or_create_draft)(buyer.pk)
        async_to_sync(request_repository.apply_transition)(draft.delete(), RequestStatus.DRAFT)

        assert async_to_sync(request_repository.find_by_id)(draft.id) is None
        assert async_to_sync(request_repository.find_draft)(buyer.pk) is None
        assert async_to_sync(request_repository.list_requests)() == []

    def test_total_ignores_deleted_services(
        self,
        request_repository,
        line_repository,
        service_repository,
        buyer,
        per_user_service,
        per_core_service,
    ):
        draft, _ = async_to_sync(request_repository.get_or_create_draft)(buyer.pk)
        for service, sub_total in ((per_user_service, "100.00"), (per_core_service, "250.50")):
            async_to_sync(line_repository.add_to_draft)(draft.id, service.id)
            async_to_sync(line_repository.set_sub_total)(
                draft.id, service.id, Decimal(sub_total), PricingStatus.PRICED
            )

        assert async_to_sync(request_repository.recalculate_total)(draft.id) == Decimal("350.50")

        async_to_sync(service_repository.soft_delete)(per_core_service.id)
        assert async_to_sync(request_repository.recalculate_total)(draft.id) == Decimal("100.00")


@pytest.mark.django_db
@pytest.mark.integration
class TestRequestLineRepository:
    """Tests for DjangoRequestLineRepository."""

    def test_add_is_idempotent(self, request_repository, line_repository, buyer, per_user_service):
        draft, _ = async_to_sync(request_repository.get_or_create_draft)(buyer.pk)

        line, created = async_to_sync(line_repository.add_to_draft)(draft.id, per_user_service.id)
        again, created_again = async_to_sync(line_repository.add_to_draft)(
            draft.id, per_user_service.id
        )

        assert created and not created_again
        assert line.id == again.id
        assert RequestLine.objects.filter(calculation_request_id=draft.id).count() == 1

    def test_cannot_add_to_non_draft(
        self, request_repository, line_repository, buyer, per_user_service
    ):
        draft, _ = async_to_sync(request_repository.get_or_create_draft)(buyer.pk)
        async_to_sync(request_repository.apply_transition)(draft.delete(), RequestStatus.DRAFT)

        line, created = async_to_sync(line_repository.add_to_draft)(draft.id, per_user_service.id)

        assert line is None
        assert created is False

    def test_priced_at_set_when_priced(
        self, request_repository, line_repository, buyer, per_user_service
    ):
        draft, _ = async_to_sync(request_repository.get_or_create_draft)(buyer.pk)
        async_to_sync(line_repository.add_to_draft)(draft.id, per_user_service.id)

        async_to_sync(line_repository.set_sub_total)(
            draft.id, per_user_service.id, Decimal("42.00"), PricingStatus.PRICED
        )

        model = RequestLine.objects.get(calculation_request_id=draft.id)
        assert model.priced_at is not None
        assert async_to_sync(line_repository.count_priced)([draft.id]) == {draft.id: 1}
