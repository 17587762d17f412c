"""
Django management command to seed the reference license catalog.

Entries whose name already exists in the live catalog are skipped, so
the command can be re-run safely.
"""

import logging
from decimal import Decimal

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from catalog.domain.license_service import LicenseService
from core.domain.value_objects import LicenseType, SupportLevel
from catalog.infrastructure.repositories.django_license_service_repository import (
    DjangoLicenseServiceRepository,
)

logger = logging.getLogger(__name__)

REFERENCE_CATALOG = [
    {
        "name": "User licenses",
        "description": "Named-user licenses billed per user and year of support.",
        "base_price": Decimal("16100.00"),
        "license_type": LicenseType.PER_USER,
        "support_level": SupportLevel.STANDARD,
        "validity_years": 1,
    },
    {
        "name": "Server licenses",
        "description": "Server licenses billed per processor core.",
        "base_price": Decimal("276200.00"),
        "license_type": LicenseType.PER_CORE,
        "support_level": SupportLevel.STANDARD,
        "validity_years": 1,
    },
    {
        "name": "Corporate subscription",
        "description": "Unlimited corporate subscription billed per year.",
        "base_price": Decimal("1500000.00"),
        "license_type": LicenseType.SUBSCRIPTION,
        "support_level": SupportLevel.PREMIUM,
        "validity_years": 1,
    },
]


class Command(BaseCommand):
    """Command to seed the reference catalog."""

    help = "Create the reference license catalog entries"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - list what would be created",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        dry_run = options["dry_run"]
        repository = DjangoLicenseServiceRepository()

        existing = {service.name for service in async_to_sync(repository.list_active)()}
        missing = [entry for entry in REFERENCE_CATALOG if entry["name"] not in existing]

        self.stdout.write(f"Found {len(missing)} catalog entries to create")

        if dry_run:
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            for entry in missing:
                self.stdout.write(
                    f"  - {entry['name']} ({entry['license_type'].value}, {entry['base_price']})"
                )
            return

        for entry in missing:
            service = async_to_sync(repository.save)(LicenseService.create(**entry))
            logger.info("Seeded catalog entry", extra={"service_id": str(service.id)})
            self.stdout.write(f"  + {service.name} [{service.id}]")

        # pylint: disable=no-member
        self.stdout.write(self.style.SUCCESS(f"Seeded {len(missing)} catalog entries"))
