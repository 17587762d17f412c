"""
URL configuration for catalog API endpoints.
"""

from django.urls import path

from api.v1.catalog import views

app_name = "catalog"

urlpatterns = [
    path(
        "services",
        views.LicenseServiceListView.as_view(),
        name="service-list",
    ),
    path(
        "services/<uuid:service_id>",
        views.LicenseServiceDetailView.as_view(),
        name="service-detail",
    ),
]
