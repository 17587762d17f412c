"""
Celery implementation of PricingTaskQueue port.
"""
import logging

from asgiref.sync import sync_to_async
from kombu.exceptions import OperationalError

from core.domain.exceptions import DispatchFailedError
from pricing.domain.pricing_task import PricingTask
from pricing.ports.pricing_backend import PricingTaskQueue

logger = logging.getLogger(__name__)


class CeleryPricingTaskQueue(PricingTaskQueue):
    """Enqueues pricing tasks on the Celery broker."""

    async def enqueue(self, task: PricingTask) -> None:
        """
        Send the task to price_request_line_task.

        Raises:
            DispatchFailedError: If the broker is unreachable
        """
        from pricing.tasks import price_request_line_task

        try:
            await sync_to_async(price_request_line_task.delay)(task.to_payload())
        except OperationalError as e:
            raise DispatchFailedError(f"Pricing queue unavailable: {e}") from e

        logger.debug(
            "Pricing task enqueued",
            extra={"request_id": str(task.request_id), "service_id": str(task.service_id)},
        )
