"""
URL configuration for pricing callback endpoints.
"""

from django.urls import path

from api.v1.pricing import views

app_name = "pricing"

urlpatterns = [
    path(
        "async/requests/<uuid:request_id>/services/<uuid:service_id>/subtotal",
        views.ReceiveSubtotalView.as_view(),
        name="receive-subtotal",
    ),
]
