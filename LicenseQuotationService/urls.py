"""
URL configuration for LicenseQuotationService project.
"""
from django.contrib import admin
from django.urls import include, path

from core.views import HealthDBView, HealthView, MetricsView, ReadyView

urlpatterns = [
    path("admin/", admin.site.urls),
    # Health check endpoints
    path("health/", HealthView.as_view(), name="health"),
    path("health/db/", HealthDBView.as_view(), name="health-db"),
    path("ready/", ReadyView.as_view(), name="ready"),
    path("metrics", MetricsView.as_view(), name="metrics"),
    # API endpoints
    path("api/v1/", include("api.v1.catalog.urls")),
    path("api/v1/", include("api.v1.quotations.urls")),
    path("api/v1/", include("api.v1.pricing.urls")),
]
