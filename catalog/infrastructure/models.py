"""
Catalog models.
"""

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class LicenseService(models.Model):
    """
    A license service offered in the catalog.

    Entries are soft-deleted so request lines keep their reference.
    """

    LICENSE_TYPE_CHOICES = [
        ("per_user", "Per user"),
        ("per_core", "Per core"),
        ("subscription", "Subscription"),
    ]

    SUPPORT_LEVEL_CHOICES = [
        ("basic", "Basic"),
        ("standard", "Standard"),
        ("premium", "Premium"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, help_text="Service display name")
    description = models.TextField(blank=True, default="")
    base_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Price per unit of the license type",
    )
    license_type = models.CharField(max_length=50, choices=LICENSE_TYPE_CHOICES)
    support_level = models.CharField(
        max_length=20,
        choices=SUPPORT_LEVEL_CHOICES,
        default="standard",
    )
    max_users = models.PositiveIntegerField(null=True, blank=True)
    validity_years = models.PositiveIntegerField(default=1)
    image_url = models.CharField(max_length=255, null=True, blank=True)
    is_deleted = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "license_services"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["license_type"]),
        ]

    def save(self, *args, **kwargs):
        """Save service with validation."""
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.license_type})"
