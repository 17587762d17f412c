"""
Unit tests for pricing dispatch, the pricing task and sub-total ingestion.
"""
import json
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import requests
from asgiref.sync import async_to_sync
from django.test import override_settings

from core.domain.exceptions import (
    DispatchFailedError,
    InvalidStateError,
    LineNotFoundError,
    ValidationFailedError,
)
from core.domain.value_objects import MAX_MONEY, PricingStatus, RequestStatus
from pricing.application.commands.receive_subtotal import ReceiveSubtotalCommand
from pricing.application.handlers.receive_subtotal_handler import ReceiveSubtotalHandler
from pricing.application.services.cost_dispatcher import CostDispatcher
from pricing.infrastructure.authenticators import SharedSecretAuthenticator
from pricing.infrastructure.celery_task_queue import CeleryPricingTaskQueue
from pricing.ports.pricing_backend import PricingTaskQueue
from pricing.tasks import price_request_line_task

pytestmark = pytest.mark.django_db

PRICER_SETTINGS = {"PRICING_SERVICE_URL": "http://pricer/tasks", "PRICING_MAX_RETRIES": 1}


class RecordingQueue(PricingTaskQueue):
    """Queue that records tasks and refuses the listed services."""

    def __init__(self, refuse=()):
        self.refuse = set(refuse)
        self.tasks = []

    async def enqueue(self, task):
        if task.service_id in self.refuse:
            raise DispatchFailedError("broker down")
        self.tasks.append(task)


def build_dispatcher(request_repository, line_repository, service_repository, queue):
    return CostDispatcher(
        request_repository=request_repository,
        line_repository=line_repository,
        service_repository=service_repository,
        task_queue=queue,
        authenticator=SharedSecretAuthenticator(secret="test-async-key"),
    )


def pricing_status(line_repository, request_id, service_id):
    return async_to_sync(line_repository.find)(request_id, service_id).pricing_status


@pytest.fixture
def make_request(request_repository, line_repository, buyer, moderator):
    """Factory for requests holding the given services, driven to a target status."""

    def _make(services, target=RequestStatus.COMPLETED, users=120, cores=48):
        draft, _ = async_to_sync(request_repository.get_or_create_draft)(buyer.pk)
        for service in services:
            async_to_sync(line_repository.add_to_draft)(draft.id, service.id)
        draft = draft.update_parameters(users=users, cores=cores)
        async_to_sync(request_repository.update_parameters)(draft)
        if target == RequestStatus.DRAFT:
            return draft

        formed = draft.format(line_count=len(services))
        async_to_sync(request_repository.apply_transition)(
            formed, RequestStatus.DRAFT, reset_lines_to=PricingStatus.NOT_REQUESTED
        )
        if target == RequestStatus.FORMED:
            return formed

        completed = formed.complete(moderator_id=moderator.pk)
        async_to_sync(request_repository.apply_transition)(
            completed, RequestStatus.FORMED, reset_lines_to=PricingStatus.PENDING
        )
        return completed

    return _make


class TestCostDispatcher:
    """Tests for CostDispatcher."""

    def test_one_task_per_line(
        self,
        make_request,
        request_repository,
        line_repository,
        service_repository,
        per_user_service,
        per_core_service,
    ):
        completed = make_request([per_user_service, per_core_service])
        queue = RecordingQueue()
        dispatcher = build_dispatcher(
            request_repository, line_repository, service_repository, queue
        )

        summary = async_to_sync(dispatcher.dispatch)(completed.id)

        assert summary.dispatched == 2
        assert summary.total == 2
        by_service = {task.service_id: task for task in queue.tasks}
        task = by_service[per_core_service.id]
        assert task.cores == 48
        assert task.secret_key == "test-async-key"
        assert task.callback_url == (
            f"http://testserver/api/v1/async/requests/{completed.id}"
            f"/services/{per_core_service.id}/subtotal"
        )

    def test_enqueue_failure_is_isolated(
        self,
        make_request,
        request_repository,
        line_repository,
        service_repository,
        per_user_service,
        per_core_service,
    ):
        """Test one refused line does not stop the others."""
        completed = make_request([per_user_service, per_core_service])
        queue = RecordingQueue(refuse={per_core_service.id})
        dispatcher = build_dispatcher(
            request_repository, line_repository, service_repository, queue
        )

        summary = async_to_sync(dispatcher.dispatch)(completed.id)

        assert summary.dispatched == 1
        assert summary.failed == 1
        assert pricing_status(line_repository, completed.id, per_core_service.id) == (
            PricingStatus.FAILED
        )
        assert pricing_status(line_repository, completed.id, per_user_service.id) == (
            PricingStatus.PENDING
        )

    def test_deleted_catalog_entry_is_skipped(
        self,
        make_request,
        request_repository,
        line_repository,
        service_repository,
        per_user_service,
        per_core_service,
    ):
        completed = make_request([per_user_service, per_core_service])
        async_to_sync(service_repository.soft_delete)(per_core_service.id)
        queue = RecordingQueue()
        dispatcher = build_dispatcher(
            request_repository, line_repository, service_repository, queue
        )

        summary = async_to_sync(dispatcher.dispatch)(completed.id)

        assert summary.dispatched == 1
        assert summary.skipped == 1

    def test_only_completed_requests_are_dispatched(
        self, make_request, request_repository, line_repository, service_repository, per_user_service
    ):
        formed = make_request([per_user_service], target=RequestStatus.FORMED)
        dispatcher = build_dispatcher(
            request_repository, line_repository, service_repository, RecordingQueue()
        )
        with pytest.raises(InvalidStateError):
            async_to_sync(dispatcher.dispatch)(formed.id)


class TestPricingTask:
    """Tests for price_request_line_task run eagerly."""

    def test_http_backend_leaves_line_pending(
        self,
        make_request,
        request_repository,
        line_repository,
        service_repository,
        per_user_service,
    ):
        """Test a pricer that accepts the task answers later via callback."""
        completed = make_request([per_user_service])
        dispatcher = build_dispatcher(
            request_repository, line_repository, service_repository, CeleryPricingTaskQueue()
        )

        with override_settings(**PRICER_SETTINGS), patch("requests.post") as mock_post:
            mock_post.return_value = MagicMock(status_code=202)
            summary = async_to_sync(dispatcher.dispatch)(completed.id)

        assert summary.dispatched == 1
        payload = json.loads(mock_post.call_args.kwargs["data"])
        assert payload["service_id"] == str(per_user_service.id)
        assert payload["secret_key"] == "test-async-key"
        assert pricing_status(line_repository, completed.id, per_user_service.id) == (
            PricingStatus.PENDING
        )

    def test_unreachable_pricer_marks_line_failed(
        self, make_request, line_repository, per_user_service
    ):
        """Test retries are exhausted and the line ends up failed."""
        completed = make_request([per_user_service])
        payload = {
            "request_id": str(completed.id),
            "service_id": str(per_user_service.id),
            "license_type": "per_user",
            "base_price": 16100.0,
            "support_coefficient": 1.0,
            "users": 120,
            "cores": 48,
            "period": 1,
            "callback_url": "http://testserver/callback",
            "secret_key": "test-async-key",
        }

        with override_settings(**PRICER_SETTINGS), patch(
            "requests.post", side_effect=requests.exceptions.ConnectionError("down")
        ) as mock_post:
            result = price_request_line_task.apply(args=[payload])

        assert result.get() is False
        assert mock_post.call_count == 2
        assert pricing_status(line_repository, completed.id, per_user_service.id) == (
            PricingStatus.FAILED
        )

    def test_local_backend_prices_in_process(
        self,
        make_request,
        request_repository,
        line_repository,
        service_repository,
        per_user_service,
        per_core_service,
    ):
        """Test 120 users x 16100 plus 48 cores x 276200."""
        completed = make_request([per_user_service, per_core_service])
        dispatcher = build_dispatcher(
            request_repository, line_repository, service_repository, CeleryPricingTaskQueue()
        )

        async_to_sync(dispatcher.dispatch)(completed.id)

        request = async_to_sync(request_repository.find_by_id)(completed.id)
        assert request.total_cost == Decimal("1932000.00") + Decimal("13257600.00")

    @pytest.mark.parametrize(
        "target, accepted, status",
        [
            (RequestStatus.COMPLETED, True, PricingStatus.PRICED),
            (RequestStatus.FORMED, False, PricingStatus.NOT_REQUESTED),
        ],
    )
    def test_local_zero_quantity_respects_request_status(
        self, make_request, line_repository, per_core_service, target, accepted, status
    ):
        """Test a zero-core line is priced at 0 only on a completed request."""
        req = make_request([per_core_service], target=target, cores=0)
        payload = {
            "request_id": str(req.id),
            "service_id": str(per_core_service.id),
            "license_type": "per_core",
            "base_price": 276200.0,
            "support_coefficient": 1.0,
            "users": 120,
            "cores": 0,
            "period": 1,
            "callback_url": "http://testserver/callback",
            "secret_key": "test-async-key",
        }

        result = price_request_line_task.apply(args=[payload])

        assert result.get() is accepted
        line = async_to_sync(line_repository.find)(req.id, per_core_service.id)
        assert line.pricing_status == status
        assert line.sub_total == Decimal("0")


class TestReceiveSubtotalHandler:
    """Tests for ReceiveSubtotalHandler."""

    @pytest.fixture
    def handler(self, request_repository, line_repository, recalculation_service):
        return ReceiveSubtotalHandler(request_repository, line_repository, recalculation_service)

    def test_applies_sub_total(self, handler, make_request, line_repository, per_user_service):
        completed = make_request([per_user_service])
        command = ReceiveSubtotalCommand(completed.id, per_user_service.id, Decimal("1000.005"))

        receipt = async_to_sync(handler.handle)(command)

        assert receipt.sub_total == Decimal("1000.01")
        assert receipt.total_cost == Decimal("1000.01")
        assert pricing_status(line_repository, completed.id, per_user_service.id) == (
            PricingStatus.PRICED
        )

    def test_redelivery_is_idempotent(self, handler, make_request, per_user_service):
        completed = make_request([per_user_service])
        command = ReceiveSubtotalCommand(completed.id, per_user_service.id, Decimal("500"))

        first = async_to_sync(handler.handle)(command)
        second = async_to_sync(handler.handle)(command)

        assert first.total_cost == second.total_cost == Decimal("500.00")

    @pytest.mark.parametrize("sub_total", [Decimal("0"), Decimal("-1")])
    def test_rejects_non_positive(self, handler, make_request, per_user_service, sub_total):
        completed = make_request([per_user_service])
        with pytest.raises(ValidationFailedError):
            async_to_sync(handler.handle)(
                ReceiveSubtotalCommand(completed.id, per_user_service.id, sub_total)
            )

    def test_rejects_unknown_line(self, handler, make_request, per_user_service, per_core_service):
        completed = make_request([per_user_service])
        with pytest.raises(LineNotFoundError):
            async_to_sync(handler.handle)(
                ReceiveSubtotalCommand(completed.id, per_core_service.id, Decimal("10"))
            )

    def test_rejects_request_not_completed(self, handler, make_request, per_user_service):
        formed = make_request([per_user_service], target=RequestStatus.FORMED)
        with pytest.raises(InvalidStateError):
            async_to_sync(handler.handle)(
                ReceiveSubtotalCommand(formed.id, per_user_service.id, Decimal("10"))
            )

    def test_unbillable_line_needs_completed_request(
        self, handler, make_request, line_repository, per_core_service
    ):
        formed = make_request([per_core_service], target=RequestStatus.FORMED, cores=0)
        with pytest.raises(InvalidStateError):
            async_to_sync(handler.record_unbillable)(formed.id, per_core_service.id)

        assert pricing_status(line_repository, formed.id, per_core_service.id) == (
            PricingStatus.NOT_REQUESTED
        )

    def test_rejects_total_above_money_limit(
        self, handler, make_request, per_user_service, per_core_service
    ):
        """Test results that each fit but overflow together are refused."""
        completed = make_request([per_user_service, per_core_service])
        async_to_sync(handler.handle)(
            ReceiveSubtotalCommand(completed.id, per_user_service.id, MAX_MONEY)
        )

        with pytest.raises(ValidationFailedError):
            async_to_sync(handler.handle)(
                ReceiveSubtotalCommand(completed.id, per_core_service.id, Decimal("1"))
            )

        assert async_to_sync(handler.request_repository.find_by_id)(completed.id).total_cost == (
            MAX_MONEY
        )
