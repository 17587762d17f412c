"""
Cost dispatcher.

Turns the lines of a completed request into pricing tasks and hands
each one to the task queue independently.
"""
import logging
import uuid
from typing import Iterable, Optional

from django.urls import reverse

from catalog.ports.license_service_repository import LicenseServiceRepository
from core.domain.exceptions import DispatchFailedError, RequestNotFoundError
from core.domain.value_objects import PricingStatus, RequestStatus
from core.infrastructure.events import event_bus
from core.metrics import pricing_tasks_dispatched_total
from pricing.application.dto.pricing_dto import DispatchSummaryDTO
from pricing.config import get_pricing_settings
from pricing.domain.events import PricingDispatchFailed, PricingTaskDispatched
from pricing.domain.pricing_task import PricingTask
from pricing.ports.callback_authenticator import CallbackAuthenticator
from pricing.ports.pricing_backend import PricingTaskQueue
from quotations.ports.calculation_request_repository import CalculationRequestRepository
from quotations.ports.request_line_repository import RequestLineRepository

logger = logging.getLogger(__name__)


def build_callback_url(request_id: uuid.UUID, service_id: uuid.UUID) -> str:
    """Absolute callback URL the pricer reports a line's sub-total to."""
    path = reverse(
        "pricing:receive-subtotal",
        kwargs={"request_id": request_id, "service_id": service_id},
    )
    return f"{get_pricing_settings().callback_base_url}{path}"


class CostDispatcher:
    """Dispatches one pricing task per line of a completed request."""

    def __init__(
        self,
        request_repository: CalculationRequestRepository,
        line_repository: RequestLineRepository,
        service_repository: LicenseServiceRepository,
        task_queue: PricingTaskQueue,
        authenticator: CallbackAuthenticator,
    ):
        """Initialize dispatcher with repositories, queue and authenticator."""
        self.request_repository = request_repository
        self.line_repository = line_repository
        self.service_repository = service_repository
        self.task_queue = task_queue
        self.authenticator = authenticator

    async def dispatch(
        self,
        request_id: uuid.UUID,
        service_ids: Optional[Iterable[uuid.UUID]] = None,
    ) -> DispatchSummaryDTO:
        """
        Enqueue pricing tasks for a completed request.

        A failed enqueue marks only that line as failed; the remaining
        lines are still dispatched.

        Args:
            request_id: Request UUID
            service_ids: Restrict dispatch to these lines (all lines if None)

        Returns:
            DispatchSummaryDTO with per-outcome counts

        Raises:
            RequestNotFoundError: If the request is missing or deleted
            InvalidStateError: If the request is not completed
        """
        request = await self.request_repository.find_by_id(request_id)
        if request is None:
            raise RequestNotFoundError(f"Request {request_id} not found")
        request.ensure_status({RequestStatus.COMPLETED}, "dispatch pricing")

        wanted = set(service_ids) if service_ids is not None else None
        lines = await self.line_repository.find_by_request(request_id)
        services = await self.service_repository.find_by_ids(
            [line.service_id for line in lines]
        )

        summary = DispatchSummaryDTO(request_id=request_id)
        for line in lines:
            if wanted is not None and line.service_id not in wanted:
                continue
            service = services.get(line.service_id)
            if service is None:
                summary.skipped += 1
                continue

            task = PricingTask.build(
                request,
                line,
                service,
                callback_url=build_callback_url(request.id, line.service_id),
                secret_key=self.authenticator.issue(request.id, line.service_id),
            )
            # A worker may price the line before enqueue returns
            await self.line_repository.mark_pricing_status(
                request.id, line.service_id, PricingStatus.PENDING
            )
            try:
                await self.task_queue.enqueue(task)
            except DispatchFailedError as e:
                summary.failed += 1
                await self._record_failure(request.id, line.service_id, e)
                continue

            summary.dispatched += 1
            pricing_tasks_dispatched_total.labels(outcome="enqueued").inc()
            await event_bus.publish(
                PricingTaskDispatched(request_id=request.id, service_id=line.service_id)
            )

        logger.info(
            "Pricing dispatched",
            extra={
                "request_id": str(request_id),
                "dispatched": summary.dispatched,
                "failed": summary.failed,
                "skipped": summary.skipped,
            },
        )
        return summary

    async def _record_failure(
        self, request_id: uuid.UUID, service_id: uuid.UUID, error: DispatchFailedError
    ) -> None:
        logger.error(
            f"Failed to enqueue pricing task: {error.message}",
            extra={"request_id": str(request_id), "service_id": str(service_id)},
        )
        pricing_tasks_dispatched_total.labels(outcome="failed").inc()
        await self.line_repository.mark_pricing_status(
            request_id, service_id, PricingStatus.FAILED
        )
        await event_bus.publish(
            PricingDispatchFailed(
                request_id=request_id,
                service_id=service_id,
                reason=error.message,
            )
        )
