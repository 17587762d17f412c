"""
Django management command to re-dispatch pricing for stuck lines.

Finds lines of completed requests that are still pending or failed and
enqueues their pricing tasks again. This command should be run
periodically (e.g., via cron or scheduled task).
"""

import logging
import uuid
from collections import defaultdict

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from catalog.infrastructure.repositories.django_license_service_repository import (
    DjangoLicenseServiceRepository,
)
from core.metrics import requests_awaiting_pricing
from pricing.application.services.cost_dispatcher import CostDispatcher
from pricing.infrastructure.authenticators import get_callback_authenticator
from pricing.infrastructure.celery_task_queue import CeleryPricingTaskQueue
from quotations.infrastructure.repositories.django_calculation_request_repository import (
    DjangoCalculationRequestRepository,
)
from quotations.infrastructure.repositories.django_request_line_repository import (
    DjangoRequestLineRepository,
)

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to retry pricing of pending or failed lines."""

    help = "Re-enqueue pricing tasks for pending or failed lines of completed requests"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--request-id",
            type=str,
            default=None,
            help="Only retry lines of this request",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - list lines without dispatching",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        dry_run = options["dry_run"]
        request_id = None
        if options["request_id"]:
            try:
                request_id = uuid.UUID(options["request_id"])
            except ValueError as e:
                raise CommandError(f"Invalid request id: {options['request_id']}") from e

        request_repo = DjangoCalculationRequestRepository()
        line_repo = DjangoRequestLineRepository()

        lines = async_to_sync(line_repo.find_awaiting_pricing)(request_id)
        requests_awaiting_pricing.set(len(lines))
        self.stdout.write(f"Found {len(lines)} line(s) awaiting pricing")

        by_request = defaultdict(set)
        for line in lines:
            by_request[line.request_id].add(line.service_id)

        if dry_run:
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No tasks will be enqueued"))
            for line in lines[:10]:
                self.stdout.write(
                    f"  - Request {line.request_id} service {line.service_id} ({line.pricing_status.value})"
                )
            return

        dispatcher = CostDispatcher(
            request_repository=request_repo,
            line_repository=line_repo,
            service_repository=DjangoLicenseServiceRepository(),
            task_queue=CeleryPricingTaskQueue(),
            authenticator=get_callback_authenticator(),
        )

        dispatched = failed = 0
        for pending_request_id, service_ids in by_request.items():
            summary = async_to_sync(dispatcher.dispatch)(pending_request_id, service_ids)
            dispatched += summary.dispatched
            failed += summary.failed

        logger.info(
            "Pricing retry finished",
            extra={"requests": len(by_request), "dispatched": dispatched, "failed": failed},
        )
        # pylint: disable=no-member
        self.stdout.write(
            self.style.SUCCESS(f"Re-dispatched {dispatched} task(s), {failed} failed")
        )
