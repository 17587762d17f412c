"""
Calculation request and request line models.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone


class LicenseCalculationRequest(models.Model):
    """
    A buyer's license calculation request (cart/order).

    Status changes are written with conditional updates so concurrent
    transitions on the same row cannot both succeed.
    """

    STATUS_CHOICES = [
        ("draft", "Draft"),
        ("formed", "Formed"),
        ("completed", "Completed"),
        ("rejected", "Rejected"),
        ("deleted", "Deleted"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default="draft",
        db_index=True,
    )
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="calculation_requests",
    )
    moderator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="moderated_calculation_requests",
        null=True,
        blank=True,
    )
    users = models.PositiveIntegerField(default=0)
    cores = models.PositiveIntegerField(default=0)
    period = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    total_cost = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0"),
        help_text="Derived from line sub-totals, never edited directly",
    )
    created_at = models.DateTimeField(default=timezone.now)
    formatted_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "license_calculation_requests"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["creator", "status"]),
            models.Index(fields=["status", "formatted_at"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["creator"],
                condition=Q(status="draft"),
                name="unique_draft_per_creator",
            ),
        ]

    def __str__(self):
        return f"Request {self.id} ({self.status})"


class RequestLine(models.Model):
    """
    A catalog service on a calculation request.

    Each (request, service) pair appears at most once.
    """

    PRICING_STATUS_CHOICES = [
        ("not_requested", "Not requested"),
        ("pending", "Pending"),
        ("priced", "Priced"),
        ("failed", "Failed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    calculation_request = models.ForeignKey(
        LicenseCalculationRequest,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    service = models.ForeignKey(
        "catalog.LicenseService",
        on_delete=models.PROTECT,
        related_name="request_lines",
    )
    support_coefficient = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=[
            MinValueValidator(Decimal("0.70")),
            MaxValueValidator(Decimal("3.00")),
        ],
    )
    sub_total = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    pricing_status = models.CharField(
        max_length=20,
        choices=PRICING_STATUS_CHOICES,
        default="not_requested",
        db_index=True,
    )
    priced_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "request_lines"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["calculation_request", "service"],
                name="unique_service_per_request",
            ),
        ]

    def __str__(self):
        return f"{self.service_id} on {self.calculation_request_id}"
