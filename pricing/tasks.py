"""
Celery tasks for pricing.

One task per request line. Tasks are acknowledged after they finish, so
a worker crash re-delivers the task; the ingestion path is idempotent.
"""
import logging
import time

from asgiref.sync import async_to_sync

from core.domain.exceptions import DispatchFailedError, DomainException
from core.domain.value_objects import PricingStatus
from core.metrics import pricing_submission_duration_seconds, pricing_submissions_total
from LicenseQuotationService.celery import app
from pricing.config import get_pricing_settings
from pricing.domain.pricing_task import PricingTask
from pricing.infrastructure.backends import get_pricing_backend

logger = logging.getLogger(__name__)


def _mark_failed(task: PricingTask) -> None:
    from quotations.infrastructure.repositories.django_request_line_repository import (
        DjangoRequestLineRepository,
    )

    async_to_sync(DjangoRequestLineRepository().mark_pricing_status)(
        task.request_id, task.service_id, PricingStatus.FAILED
    )


@app.task(bind=True, max_retries=3, acks_late=True)
def price_request_line_task(self, payload: dict):
    """
    Celery task pricing one request line.

    Args:
        payload: PricingTask payload

    Returns:
        True if the backend accepted the task, False if it gave up
    """
    task = PricingTask.from_payload(payload)
    backend = get_pricing_backend()
    max_retries = get_pricing_settings().max_retries
    started = time.time()

    try:
        backend.submit(task)
    except DispatchFailedError as exc:
        pricing_submissions_total.labels(backend=backend.name, outcome="failed").inc()
        if self.request.retries >= max_retries:
            logger.error(
                f"Pricing gave up after {self.request.retries} retries: {exc.message}",
                extra={"request_id": str(task.request_id), "service_id": str(task.service_id)},
            )
            _mark_failed(task)
            return False
        logger.warning(
            f"Pricing submission failed, retrying: {exc.message}",
            extra={"request_id": str(task.request_id), "service_id": str(task.service_id)},
        )
        raise self.retry(
            exc=exc, countdown=2 ** self.request.retries, max_retries=max_retries
        )
    except DomainException as exc:
        # The request moved on (deleted, line removed); nothing left to price
        pricing_submissions_total.labels(backend=backend.name, outcome="discarded").inc()
        logger.warning(
            f"Pricing result discarded: {exc.message}",
            extra={"request_id": str(task.request_id), "service_id": str(task.service_id)},
        )
        return False
    finally:
        pricing_submission_duration_seconds.labels(backend=backend.name).observe(
            time.time() - started
        )

    pricing_submissions_total.labels(backend=backend.name, outcome="accepted").inc()
    return True
