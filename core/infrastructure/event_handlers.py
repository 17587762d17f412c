"""
Event handlers for domain events.

These handlers process domain events for side effects like audit
logging and metrics.
"""

import logging

from catalog.domain.events import (
    LicenseServiceCreated,
    LicenseServiceDeleted,
    LicenseServiceUpdated,
)
from core.domain.events import DomainEvent, EventHandler
from core.metrics import (
    catalog_changes_total,
    pricing_callbacks_total,
)
from pricing.domain.events import (
    LineSubtotalReceived,
    PricingDispatchFailed,
    PricingTaskDispatched,
)
from quotations.domain.events import (
    RequestCompleted,
    RequestDeleted,
    RequestFormed,
    RequestRejected,
)

logger = logging.getLogger(__name__)

AUDITED_EVENTS = (
    LicenseServiceCreated,
    LicenseServiceUpdated,
    LicenseServiceDeleted,
    RequestFormed,
    RequestCompleted,
    RequestRejected,
    RequestDeleted,
    PricingTaskDispatched,
    PricingDispatchFailed,
    LineSubtotalReceived,
)


class AuditLogEventHandler(EventHandler):
    """
    Event handler for audit logging.

    Writes every domain event to the audit logger as a structured record.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        logger.info(
            "Audit log: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra={
                "event_id": str(event.event_id),
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "occurred_at": event.occurred_at.isoformat(),
                "payload": event.payload(),
            },
        )


class MetricsEventHandler(EventHandler):
    """Counts business events in Prometheus."""

    CATALOG_CHANGES = {
        LicenseServiceCreated: "created",
        LicenseServiceUpdated: "updated",
        LicenseServiceDeleted: "deleted",
    }

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for metrics.

        Args:
            event: Domain event
        """
        change = self.CATALOG_CHANGES.get(type(event))
        if change:
            catalog_changes_total.labels(change=change).inc()
        elif isinstance(event, LineSubtotalReceived):
            pricing_callbacks_total.labels(outcome="applied").inc()


def register_event_handlers():
    """Register all event handlers with the event bus."""
    from core.infrastructure.events import event_bus

    audit_handler = AuditLogEventHandler()
    metrics_handler = MetricsEventHandler()

    for event_type in AUDITED_EVENTS:
        event_bus.subscribe(event_type, audit_handler)

    for event_type in (*MetricsEventHandler.CATALOG_CHANGES, LineSubtotalReceived):
        event_bus.subscribe(event_type, metrics_handler)

    logger.info("Event handlers registered")
