"""
Unit tests for calculation request handlers.

Handlers run against the Django repositories through async_to_sync so
ORM calls stay on the test thread.
"""
import uuid
from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync

from core.domain.exceptions import (
    InvalidStateError,
    InvalidStateTransitionError,
    LicenseServiceNotFoundError,
    PermissionDeniedError,
    PreconditionFailedError,
    RequestNotFoundError,
    ValidationFailedError,
)
from core.domain.value_objects import RequestStatus
from pricing.application.services.cost_dispatcher import CostDispatcher
from pricing.infrastructure.authenticators import get_callback_authenticator
from pricing.infrastructure.celery_task_queue import CeleryPricingTaskQueue
from quotations.application.commands.add_service_to_request import (
    AddServiceToRequestCommand,
)
from quotations.application.commands.complete_request import CompleteRequestCommand
from quotations.application.commands.delete_request import DeleteRequestCommand
from quotations.application.commands.format_request import FormatRequestCommand
from quotations.application.commands.reject_request import RejectRequestCommand
from quotations.application.commands.remove_service_from_request import (
    RemoveServiceFromRequestCommand,
)
from quotations.application.commands.update_request_parameters import (
    UpdateRequestParametersCommand,
)
from quotations.application.commands.update_support_coefficient import (
    UpdateSupportCoefficientCommand,
)
from quotations.application.handlers.request_lifecycle_handlers import (
    CompleteRequestHandler,
    DeleteRequestHandler,
    FormatRequestHandler,
    RejectRequestHandler,
    UpdateRequestParametersHandler,
)
from quotations.application.handlers.request_line_handlers import (
    AddServiceToRequestHandler,
    RemoveServiceFromRequestHandler,
    UpdateSupportCoefficientHandler,
)
from quotations.application.handlers.request_query_handlers import (
    GetCartHandler,
    GetRequestHandler,
    ListRequestsHandler,
)
from quotations.application.queries.get_cart import GetCartQuery
from quotations.application.queries.get_request import GetRequestQuery
from quotations.application.queries.list_requests import ListRequestsQuery

pytestmark = pytest.mark.django_db


@pytest.fixture
def handlers(request_repository, line_repository, service_repository, recalculation_service):
    """All request handlers wired to the Django repositories."""
    repos = {
        "request_repository": request_repository,
        "line_repository": line_repository,
        "service_repository": service_repository,
    }
    with_recalc = dict(repos, recalculation_service=recalculation_service)
    dispatcher = CostDispatcher(
        task_queue=CeleryPricingTaskQueue(),
        authenticator=get_callback_authenticator(),
        **repos,
    )
    return {
        "add": AddServiceToRequestHandler(**with_recalc),
        "remove": RemoveServiceFromRequestHandler(**with_recalc),
        "coefficient": UpdateSupportCoefficientHandler(**with_recalc),
        "parameters": UpdateRequestParametersHandler(**with_recalc),
        "format": FormatRequestHandler(**with_recalc),
        "complete": CompleteRequestHandler(cost_dispatcher=dispatcher, **repos),
        "reject": RejectRequestHandler(**repos),
        "delete": DeleteRequestHandler(request_repository=request_repository),
        "get": GetRequestHandler(**repos),
        "list": ListRequestsHandler(
            request_repository=request_repository, line_repository=line_repository
        ),
        "cart": GetCartHandler(
            request_repository=request_repository, line_repository=line_repository
        ),
    }


def run(handler, message):
    return async_to_sync(handler.handle)(message)


@pytest.fixture
def draft_id(handlers, buyer_actor, per_user_service):
    """A draft holding the per-user service."""
    result = run(handlers["add"], AddServiceToRequestCommand(buyer_actor, per_user_service.id))
    return result.request_id


@pytest.fixture
def formed_id(handlers, buyer_actor, draft_id):
    """A formed request for 120 users."""
    run(handlers["parameters"], UpdateRequestParametersCommand(buyer_actor, draft_id, users=120))
    run(handlers["format"], FormatRequestCommand(buyer_actor, draft_id))
    return draft_id


class TestAddServiceToRequest:
    """Tests for AddServiceToRequestHandler."""

    def test_creates_draft_on_first_add(self, handlers, buyer_actor, per_user_service):
        result = run(
            handlers["add"], AddServiceToRequestCommand(buyer_actor, per_user_service.id)
        )
        assert result.created is True
        assert result.line_count == 1

        cart = run(handlers["cart"], GetCartQuery(buyer_actor))
        assert cart.request_id == result.request_id
        assert cart.line_count == 1

    def test_adding_same_service_twice_is_idempotent(
        self, handlers, buyer_actor, per_user_service, draft_id
    ):
        """Test a second add keeps a single line on the same draft."""
        result = run(
            handlers["add"], AddServiceToRequestCommand(buyer_actor, per_user_service.id)
        )
        assert result.request_id == draft_id
        assert result.created is False
        assert result.line_count == 1

    def test_unknown_service(self, handlers, buyer_actor):
        with pytest.raises(LicenseServiceNotFoundError):
            run(handlers["add"], AddServiceToRequestCommand(buyer_actor, uuid.uuid4()))

    def test_empty_cart(self, handlers, buyer_actor):
        cart = run(handlers["cart"], GetCartQuery(buyer_actor))
        assert cart.request_id is None
        assert cart.line_count == 0


class TestDraftEditing:
    """Tests for parameter, coefficient and line edits."""

    def test_parameters_reprice_lines(self, handlers, buyer_actor, draft_id):
        """Test 120 users at 16100 gives 1,932,000."""
        detail = run(
            handlers["parameters"],
            UpdateRequestParametersCommand(buyer_actor, draft_id, users=120),
        )
        assert detail.users == 120
        assert detail.total_cost == Decimal("1932000.00")
        assert detail.lines[0].sub_total == Decimal("1932000.00")
        assert detail.ready_count == 1

    def test_coefficient_is_clamped(self, handlers, buyer_actor, per_user_service, draft_id):
        run(handlers["parameters"], UpdateRequestParametersCommand(buyer_actor, draft_id, users=120))
        detail = run(
            handlers["coefficient"],
            UpdateSupportCoefficientCommand(
                buyer_actor, draft_id, per_user_service.id, Decimal("5")
            ),
        )
        assert detail.lines[0].support_coefficient == Decimal("3.00")
        assert detail.total_cost == Decimal("5796000.00")

    def test_moderator_may_adjust_coefficient_of_formed_request(
        self, handlers, moderator_actor, per_user_service, formed_id
    ):
        detail = run(
            handlers["coefficient"],
            UpdateSupportCoefficientCommand(
                moderator_actor, formed_id, per_user_service.id, Decimal("1.3")
            ),
        )
        assert detail.status == RequestStatus.FORMED.value
        assert detail.total_cost == Decimal("2511600.00")

    def test_remove_last_line_zeroes_total(
        self, handlers, buyer_actor, per_user_service, draft_id
    ):
        run(handlers["parameters"], UpdateRequestParametersCommand(buyer_actor, draft_id, users=10))
        detail = run(
            handlers["remove"],
            RemoveServiceFromRequestCommand(buyer_actor, draft_id, per_user_service.id),
        )
        assert detail.lines == []
        assert detail.total_cost == Decimal("0.00")

    def test_oversized_parameters_change_nothing(
        self, handlers, buyer_actor, make_service, draft_id
    ):
        """Test a total that cannot be stored leaves parameters and prices as they were."""
        expensive = make_service(name="Datacenter licenses", base_price="9999999999.99")
        run(handlers["add"], AddServiceToRequestCommand(buyer_actor, expensive.id))
        run(handlers["parameters"], UpdateRequestParametersCommand(buyer_actor, draft_id, users=10))

        with pytest.raises(ValidationFailedError):
            run(
                handlers["parameters"],
                UpdateRequestParametersCommand(buyer_actor, draft_id, users=200),
            )

        detail = run(handlers["get"], GetRequestQuery(buyer_actor, draft_id))
        assert detail.users == 10
        assert detail.total_cost == Decimal("100000160999.90")

    def test_oversized_coefficient_changes_nothing(
        self, handlers, buyer_actor, make_service, draft_id
    ):
        expensive = make_service(name="Datacenter licenses", base_price="9999999999.99")
        run(handlers["add"], AddServiceToRequestCommand(buyer_actor, expensive.id))
        run(handlers["parameters"], UpdateRequestParametersCommand(buyer_actor, draft_id, users=60))

        with pytest.raises(ValidationFailedError):
            run(
                handlers["coefficient"],
                UpdateSupportCoefficientCommand(buyer_actor, draft_id, expensive.id, Decimal("3")),
            )

        detail = run(handlers["get"], GetRequestQuery(buyer_actor, draft_id))
        line = next(item for item in detail.lines if item.service_id == expensive.id)
        assert line.support_coefficient == Decimal("1.00")
        assert detail.total_cost == Decimal("600000965999.40")

    def test_cannot_remove_lines_after_format(
        self, handlers, buyer_actor, per_user_service, formed_id
    ):
        with pytest.raises(InvalidStateError):
            run(
                handlers["remove"],
                RemoveServiceFromRequestCommand(buyer_actor, formed_id, per_user_service.id),
            )

    def test_other_buyer_cannot_see_draft(self, handlers, other_actor, draft_id):
        """Test foreign requests look missing rather than forbidden."""
        with pytest.raises(RequestNotFoundError):
            run(
                handlers["parameters"],
                UpdateRequestParametersCommand(other_actor, draft_id, users=1),
            )

    def test_moderator_cannot_edit_foreign_draft(self, handlers, moderator_actor, draft_id):
        with pytest.raises(PermissionDeniedError):
            run(
                handlers["parameters"],
                UpdateRequestParametersCommand(moderator_actor, draft_id, users=1),
            )


class TestLifecycle:
    """Tests for format, complete, reject and delete."""

    def test_format_requires_billable_parameters(self, handlers, buyer_actor, draft_id):
        with pytest.raises(PreconditionFailedError):
            run(handlers["format"], FormatRequestCommand(buyer_actor, draft_id))

    def test_format(self, handlers, buyer_actor, formed_id):
        detail = run(handlers["get"], GetRequestQuery(buyer_actor, formed_id))
        assert detail.status == RequestStatus.FORMED.value
        assert detail.formatted_at is not None
        assert detail.total_cost == Decimal("1932000.00")

        cart = run(handlers["cart"], GetCartQuery(buyer_actor))
        assert cart.request_id is None

    def test_complete_prices_lines(self, handlers, moderator_actor, moderator, formed_id):
        """Test completion dispatches one task per line and ends fully priced."""
        result = run(handlers["complete"], CompleteRequestCommand(moderator_actor, formed_id))

        assert result.dispatch.dispatched == 1
        assert result.dispatch.failed == 0
        assert result.request.status == RequestStatus.COMPLETED.value
        assert result.request.moderator_id == moderator.pk
        assert result.request.total_cost == Decimal("1932000.00")
        assert result.request.lines[0].pricing_status == "priced"

    def test_complete_twice_fails(self, handlers, moderator_actor, formed_id):
        run(handlers["complete"], CompleteRequestCommand(moderator_actor, formed_id))
        with pytest.raises(InvalidStateTransitionError):
            run(handlers["complete"], CompleteRequestCommand(moderator_actor, formed_id))

    def test_buyer_cannot_complete(self, handlers, buyer_actor, formed_id):
        with pytest.raises(PermissionDeniedError):
            run(handlers["complete"], CompleteRequestCommand(buyer_actor, formed_id))

    def test_reject(self, handlers, moderator_actor, formed_id):
        detail = run(handlers["reject"], RejectRequestCommand(moderator_actor, formed_id))
        assert detail.status == RequestStatus.REJECTED.value
        assert detail.completed_at is not None

    def test_cannot_reject_draft(self, handlers, moderator_actor, draft_id):
        with pytest.raises(InvalidStateTransitionError):
            run(handlers["reject"], RejectRequestCommand(moderator_actor, draft_id))

    def test_deleted_draft_disappears(
        self, handlers, buyer_actor, per_user_service, draft_id
    ):
        """Test a deleted draft is gone and the next add starts a new one."""
        run(handlers["delete"], DeleteRequestCommand(buyer_actor, draft_id))

        with pytest.raises(RequestNotFoundError):
            run(handlers["get"], GetRequestQuery(buyer_actor, draft_id))

        result = run(
            handlers["add"], AddServiceToRequestCommand(buyer_actor, per_user_service.id)
        )
        assert result.request_id != draft_id

    def test_cannot_delete_formed_request(self, handlers, buyer_actor, formed_id):
        with pytest.raises(InvalidStateTransitionError):
            run(handlers["delete"], DeleteRequestCommand(buyer_actor, formed_id))


class TestListRequests:
    """Tests for ListRequestsHandler."""

    def test_buyers_see_only_their_requests(
        self, handlers, buyer_actor, other_actor, moderator_actor, per_user_service, draft_id
    ):
        run(handlers["add"], AddServiceToRequestCommand(other_actor, per_user_service.id))

        own = run(handlers["list"], ListRequestsQuery(buyer_actor))
        assert [item.id for item in own] == [draft_id]

        everything = run(handlers["list"], ListRequestsQuery(moderator_actor))
        assert len(everything) == 2

    def test_status_filter(self, handlers, moderator_actor, formed_id):
        formed = run(
            handlers["list"], ListRequestsQuery(moderator_actor, status=RequestStatus.FORMED)
        )
        assert [item.id for item in formed] == [formed_id]
        assert formed[0].ready_count == 1

        drafts = run(
            handlers["list"], ListRequestsQuery(moderator_actor, status=RequestStatus.DRAFT)
        )
        assert drafts == []
