"""
Unit tests for the metrics middleware helpers.
"""
import uuid

import pytest

from core.middleware.metrics import normalize_endpoint


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/health/", "/health/"),
        ("/api/v1/services", "/api/v1/services"),
        ("/admin/auth/user/42/change/", "/admin/auth/user/{id}/change/"),
        ("/api/v1/requests?status=formed", "/api/v1/requests"),
    ],
)
def test_normalize_endpoint(path, expected):
    assert normalize_endpoint(path) == expected


def test_normalize_endpoint_collapses_uuids():
    """Test both ids of a line route are collapsed."""
    path = f"/api/v1/requests/{uuid.uuid4()}/services/{uuid.uuid4()}"
    assert normalize_endpoint(path) == "/api/v1/requests/{id}/services/{id}"
