"""
Integration tests for calculation request API endpoints.
"""
import uuid

import pytest
from django.urls import reverse


def add_service(client, service):
    return client.post(
        reverse("quotations:add-to-request"), {"service_id": str(service.id)}, format="json"
    )


def detail_url(request_id):
    return reverse("quotations:request-detail", kwargs={"request_id": request_id})


def line_url(request_id, service):
    return reverse(
        "quotations:request-line", kwargs={"request_id": request_id, "service_id": service.id}
    )


@pytest.fixture
def draft_id(buyer_client, per_user_service, per_core_service):
    add_service(buyer_client, per_user_service)
    return add_service(buyer_client, per_core_service).json()["request_id"]


@pytest.fixture
def formed_id(buyer_client, draft_id):
    buyer_client.put(detail_url(draft_id), {"users": 120, "cores": 48}, format="json")
    response = buyer_client.put(
        reverse("quotations:format-request", kwargs={"request_id": draft_id})
    )
    assert response.status_code == 200
    return draft_id


@pytest.mark.django_db
@pytest.mark.integration
class TestQuotationsAPI:
    """Integration tests for the request lifecycle over HTTP."""

    def test_add_to_request(self, buyer_client, per_user_service):
        response = add_service(buyer_client, per_user_service)

        assert response.status_code == 201
        data = response.json()
        assert data["created"] is True
        assert data["line_count"] == 1

    def test_add_same_service_twice(self, buyer_client, per_user_service):
        """Test a repeated add returns 200 and keeps a single line."""
        first = add_service(buyer_client, per_user_service).json()
        response = add_service(buyer_client, per_user_service)

        assert response.status_code == 200
        assert response.json()["request_id"] == first["request_id"]
        assert response.json()["line_count"] == 1

    def test_add_requires_authentication(self, api_client, per_user_service):
        response = add_service(api_client, per_user_service)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_add_invalid_body(self, buyer_client):
        response = buyer_client.post(
            reverse("quotations:add-to-request"), {"service_id": "nope"}, format="json"
        )

        assert response.status_code == 400

    def test_cart(self, buyer_client, draft_id):
        response = buyer_client.get(reverse("quotations:cart"))

        assert response.status_code == 200
        assert response.json() == {"request_id": draft_id, "line_count": 2}

    def test_parameters_update_reprices(self, buyer_client, draft_id):
        """Test 120 users and 48 cores price both lines."""
        response = buyer_client.put(
            detail_url(draft_id), {"users": 120, "cores": 48}, format="json"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_cost"] == "15189600.00"
        assert data["ready_count"] == 2
        assert {line["sub_total"] for line in data["lines"]} == {"1932000.00", "13257600.00"}

    def test_parameters_reject_zero_period(self, buyer_client, draft_id):
        response = buyer_client.put(detail_url(draft_id), {"period": 0}, format="json")

        assert response.status_code == 400

    def test_coefficient_update(self, buyer_client, draft_id, per_user_service):
        buyer_client.put(detail_url(draft_id), {"users": 120}, format="json")
        response = buyer_client.put(
            line_url(draft_id, per_user_service), {"support_coefficient": "1.3"}, format="json"
        )

        assert response.status_code == 200
        line = next(
            item for item in response.json()["lines"] if item["service_id"] == str(per_user_service.id)
        )
        assert line["support_coefficient"] == "1.30"
        assert line["sub_total"] == "2511600.00"
        assert response.json()["total_cost"] == "2511600.00"

    def test_remove_line(self, buyer_client, draft_id, per_core_service):
        response = buyer_client.delete(line_url(draft_id, per_core_service))

        assert response.status_code == 200
        assert len(response.json()["lines"]) == 1

    def test_remove_unknown_line(self, buyer_client, draft_id):
        url = reverse(
            "quotations:request-line",
            kwargs={"request_id": draft_id, "service_id": uuid.uuid4()},
        )
        response = buyer_client.delete(url)

        assert response.status_code == 404

    def test_format_without_parameters(self, buyer_client, draft_id):
        response = buyer_client.put(
            reverse("quotations:format-request", kwargs={"request_id": draft_id})
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "PRECONDITION_FAILED"

    def test_full_lifecycle(self, buyer_client, moderator_client, formed_id):
        """Test draft to completed with in-process pricing."""
        response = moderator_client.put(
            reverse("quotations:complete-request", kwargs={"request_id": formed_id})
        )

        assert response.status_code == 200
        data = response.json()
        assert data["dispatch"] == {"dispatched": 2, "failed": 0, "skipped": 0}
        assert data["request"]["status"] == "completed"
        assert data["request"]["total_cost"] == "15189600.00"

        detail = buyer_client.get(detail_url(formed_id)).json()
        assert detail["status"] == "completed"
        assert detail["ready_count"] == 2
        assert {line["pricing_status"] for line in detail["lines"]} == {"priced"}

    def test_double_complete_conflicts(self, moderator_client, formed_id):
        url = reverse("quotations:complete-request", kwargs={"request_id": formed_id})
        assert moderator_client.put(url).status_code == 200

        response = moderator_client.put(url)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_STATE_TRANSITION"

    def test_buyer_cannot_complete(self, buyer_client, formed_id):
        response = buyer_client.put(
            reverse("quotations:complete-request", kwargs={"request_id": formed_id})
        )

        assert response.status_code == 403

    def test_reject(self, moderator_client, formed_id):
        response = moderator_client.put(
            reverse("quotations:reject-request", kwargs={"request_id": formed_id})
        )

        assert response.status_code == 200
        assert response.json()["status"] == "rejected"

    def test_lines_frozen_after_format(self, buyer_client, formed_id, per_core_service):
        response = buyer_client.delete(line_url(formed_id, per_core_service))

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_STATE"

    def test_foreign_request_is_hidden(self, other_client, draft_id):
        assert other_client.get(detail_url(draft_id)).status_code == 404

    def test_moderator_sees_foreign_request(self, moderator_client, draft_id):
        response = moderator_client.get(detail_url(draft_id))

        assert response.status_code == 200
        assert response.json()["status"] == "draft"

    def test_deleted_draft_is_404(self, buyer_client, draft_id):
        assert buyer_client.delete(detail_url(draft_id)).status_code == 204

        assert buyer_client.get(detail_url(draft_id)).status_code == 404
        assert buyer_client.get(reverse("quotations:cart")).json()["request_id"] is None

    def test_list_requests(self, buyer_client, other_client, moderator_client, formed_id, per_user_service):
        add_service(other_client, per_user_service)

        own = buyer_client.get(reverse("quotations:request-list")).json()
        assert [item["id"] for item in own] == [formed_id]
        assert "lines" not in own[0]

        formed = moderator_client.get(
            reverse("quotations:request-list"), {"status": "formed"}
        ).json()
        assert [item["id"] for item in formed] == [formed_id]

    def test_list_rejects_inverted_date_range(self, moderator_client):
        response = moderator_client.get(
            reverse("quotations:request-list"),
            {"date_from": "2024-02-01", "date_to": "2024-01-01"},
        )

        assert response.status_code == 400

    def test_list_rejects_deleted_status_filter(self, moderator_client):
        response = moderator_client.get(reverse("quotations:request-list"), {"status": "deleted"})

        assert response.status_code == 400


@pytest.mark.django_db
@pytest.mark.integration
class TestCoefficientAndAmountLimits:
    """Coefficients are clamped; amounts that cannot be stored are refused."""

    @pytest.mark.parametrize(
        "raw, stored, sub_total",
        [
            ("10000", "3.00", "5796000.00"),
            (1.333, "1.33", "2569560.00"),
            ("0.1", "0.70", "1352400.00"),
        ],
    )
    def test_coefficient_is_clamped_and_rounded(
        self, buyer_client, draft_id, per_user_service, raw, stored, sub_total
    ):
        buyer_client.put(detail_url(draft_id), {"users": 120}, format="json")
        response = buyer_client.put(
            line_url(draft_id, per_user_service), {"support_coefficient": raw}, format="json"
        )

        assert response.status_code == 200
        line = next(
            item for item in response.json()["lines"] if item["service_id"] == str(per_user_service.id)
        )
        assert line["support_coefficient"] == stored
        assert line["sub_total"] == sub_total
        assert response.json()["total_cost"] == sub_total

    def test_non_numeric_coefficient_is_400(self, buyer_client, draft_id, per_user_service):
        response = buyer_client.put(
            line_url(draft_id, per_user_service), {"support_coefficient": "high"}, format="json"
        )

        assert response.status_code == 400

    def test_usage_above_limit_is_400(self, buyer_client, draft_id):
        buyer_client.put(detail_url(draft_id), {"users": 120}, format="json")

        response = buyer_client.put(detail_url(draft_id), {"users": 1000000000}, format="json")

        assert response.status_code == 400
        detail = buyer_client.get(detail_url(draft_id)).json()
        assert detail["users"] == 120
        assert detail["total_cost"] == "1932000.00"

    def test_oversized_total_leaves_request_unchanged(
        self, buyer_client, draft_id, make_service
    ):
        """Test a parameter change whose total cannot be stored writes nothing."""
        expensive = make_service(name="Datacenter licenses", base_price="9999999999.99")
        buyer_client.put(detail_url(draft_id), {"users": 10}, format="json")
        assert add_service(buyer_client, expensive).status_code == 201

        response = buyer_client.put(detail_url(draft_id), {"users": 200}, format="json")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_FAILED"
        detail = buyer_client.get(detail_url(draft_id)).json()
        assert detail["users"] == 10
        assert detail["total_cost"] == "100000160999.90"
        assert sorted(line["sub_total"] for line in detail["lines"]) == [
            "0.00",
            "161000.00",
            "99999999999.90",
        ]

    def test_oversized_line_is_not_added(self, buyer_client, draft_id, make_service):
        expensive = make_service(name="Datacenter licenses", base_price="9999999999.99")
        buyer_client.put(detail_url(draft_id), {"users": 120}, format="json")

        response = add_service(buyer_client, expensive)

        assert response.status_code == 400
        detail = buyer_client.get(detail_url(draft_id)).json()
        assert len(detail["lines"]) == 2
        assert detail["total_cost"] == "1932000.00"
