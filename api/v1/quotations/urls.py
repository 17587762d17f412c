"""
URL configuration for calculation request API endpoints.
"""

from django.urls import path

from api.v1.quotations import views

app_name = "quotations"

urlpatterns = [
    path(
        "requests/add-to-request",
        views.AddServiceToRequestView.as_view(),
        name="add-to-request",
    ),
    path(
        "requests/cart",
        views.CartView.as_view(),
        name="cart",
    ),
    path(
        "requests",
        views.RequestListView.as_view(),
        name="request-list",
    ),
    path(
        "requests/<uuid:request_id>",
        views.RequestDetailView.as_view(),
        name="request-detail",
    ),
    path(
        "requests/<uuid:request_id>/format",
        views.FormatRequestView.as_view(),
        name="format-request",
    ),
    path(
        "requests/<uuid:request_id>/complete",
        views.CompleteRequestView.as_view(),
        name="complete-request",
    ),
    path(
        "requests/<uuid:request_id>/reject",
        views.RejectRequestView.as_view(),
        name="reject-request",
    ),
    path(
        "requests/<uuid:request_id>/services/<uuid:service_id>",
        views.RequestLineView.as_view(),
        name="request-line",
    ),
]
