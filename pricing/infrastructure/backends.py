"""
Pricing backends.

HttpPricingBackend posts tasks to the external pricer, which answers
later through the callback endpoint. LocalPricingBackend applies the
reference formula and feeds the result through the same ingestion
handler a callback would use.
"""
import json
import logging

import requests
from asgiref.sync import async_to_sync

from core.domain.exceptions import DispatchFailedError
from pricing.application.commands.receive_subtotal import ReceiveSubtotalCommand
from pricing.application.handlers.receive_subtotal_handler import ReceiveSubtotalHandler
from pricing.config import get_pricing_settings
from pricing.domain.pricing_task import PricingTask
from pricing.ports.pricing_backend import PricingBackend
from quotations.domain.services import CostCalculator

logger = logging.getLogger(__name__)


class HttpPricingBackend(PricingBackend):
    """Submits pricing tasks to the external pricer over HTTP."""

    name = "http"

    def __init__(self, service_url: str, timeout: float):
        """
        Initialize backend.

        Args:
            service_url: Pricer endpoint accepting task payloads
            timeout: Per-request timeout in seconds
        """
        self.service_url = service_url
        self.timeout = timeout

    def submit(self, task: PricingTask) -> None:
        """
        POST the task payload to the pricer.

        Raises:
            DispatchFailedError: On connection errors, timeouts or non-2xx responses
        """
        payload_json = json.dumps(task.to_payload(), sort_keys=True)
        headers = {
            "Content-Type": "application/json",
            "User-Agent": "License-Quotation-Pricing/1.0",
        }
        try:
            response = requests.post(
                self.service_url,
                data=payload_json,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise DispatchFailedError(
                f"Pricer rejected task for {task.request_id}/{task.service_id}: {e}"
            ) from e

        logger.debug(
            "Pricing task accepted by pricer",
            extra={
                "request_id": str(task.request_id),
                "service_id": str(task.service_id),
                "status_code": response.status_code,
            },
        )


class LocalPricingBackend(PricingBackend):
    """Prices tasks in-process with CostCalculator."""

    name = "local"

    def __init__(self, receive_handler: ReceiveSubtotalHandler):
        """Initialize backend with the ingestion handler."""
        self.receive_handler = receive_handler

    def submit(self, task: PricingTask) -> None:
        """Compute the sub-total and apply it like a callback would."""
        sub_total = CostCalculator.sub_total(
            task.base_price,
            task.license_type,
            task.support_coefficient,
            task.parameters,
        )
        if sub_total > 0:
            async_to_sync(self.receive_handler.handle)(
                ReceiveSubtotalCommand(
                    request_id=task.request_id,
                    service_id=task.service_id,
                    sub_total=sub_total,
                )
            )
            return

        # A zero quantity prices to zero, which the callback contract rejects
        async_to_sync(self.receive_handler.record_unbillable)(task.request_id, task.service_id)


def get_pricing_backend() -> PricingBackend:
    """
    Build the backend for the current settings.

    Returns:
        LocalPricingBackend when PRICING_SERVICE_URL is empty, else HttpPricingBackend
    """
    pricing_settings = get_pricing_settings()
    if not pricing_settings.synchronous:
        return HttpPricingBackend(
            service_url=pricing_settings.service_url,
            timeout=pricing_settings.dispatch_timeout,
        )

    from catalog.infrastructure.repositories.django_license_service_repository import (
        DjangoLicenseServiceRepository,
    )
    from quotations.application.services.recalculation_service import (
        RecalculationService,
    )
    from quotations.infrastructure.repositories.django_calculation_request_repository import (
        DjangoCalculationRequestRepository,
    )
    from quotations.infrastructure.repositories.django_request_line_repository import (
        DjangoRequestLineRepository,
    )

    request_repository = DjangoCalculationRequestRepository()
    line_repository = DjangoRequestLineRepository()
    recalculation_service = RecalculationService(
        request_repository, line_repository, DjangoLicenseServiceRepository()
    )
    return LocalPricingBackend(
        receive_handler=ReceiveSubtotalHandler(
            request_repository, line_repository, recalculation_service
        )
    )
