"""
Django implementation of RequestLineRepository port.
"""
import uuid
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from asgiref.sync import sync_to_async
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from core.domain.value_objects import PricingStatus, RequestStatus
from quotations.domain.request_line import RequestLine
from quotations.infrastructure.models import (
    LicenseCalculationRequest as RequestModel,
    RequestLine as RequestLineModel,
)
from quotations.ports.request_line_repository import RequestLineRepository


class DjangoRequestLineRepository(RequestLineRepository):
    """Django ORM implementation of RequestLineRepository."""

    def _to_domain(self, model: RequestLineModel) -> RequestLine:
        """
        Convert Django model to domain entity.

        Args:
            model: Django RequestLine model

        Returns:
            RequestLine domain entity
        """
        return RequestLine(
            id=model.id,
            request_id=model.calculation_request_id,
            service_id=model.service_id,
            support_coefficient=model.support_coefficient,
            sub_total=model.sub_total,
            pricing_status=PricingStatus(model.pricing_status),
        )

    def _pair(self, request_id: uuid.UUID, service_id: uuid.UUID):
        return RequestLineModel.objects.filter(
            calculation_request_id=request_id, service_id=service_id
        )

    @sync_to_async
    def add_to_draft(
        self, request_id: uuid.UUID, service_id: uuid.UUID
    ) -> Tuple[Optional[RequestLine], bool]:
        """
        Add a service to a draft request unless it is already present.

        The request row is locked so the draft cannot be formed between
        the status check and the insert.
        """
        with transaction.atomic():
            draft = (
                RequestModel.objects.select_for_update()
                .filter(id=request_id, status=RequestStatus.DRAFT.value)
                .first()
            )
            if draft is None:
                return None, False

            line = RequestLine.create(request_id=request_id, service_id=service_id)
            model, created = RequestLineModel.objects.get_or_create(
                calculation_request_id=request_id,
                service_id=service_id,
                defaults={
                    "id": line.id,
                    "support_coefficient": line.support_coefficient,
                    "sub_total": line.sub_total,
                    "pricing_status": line.pricing_status.value,
                },
            )
        return self._to_domain(model), created

    @sync_to_async
    def find(self, request_id: uuid.UUID, service_id: uuid.UUID) -> Optional[RequestLine]:
        """Find the line for a (request, service) pair."""
        model = self._pair(request_id, service_id).first()
        return self._to_domain(model) if model else None

    @sync_to_async
    def find_by_request(self, request_id: uuid.UUID) -> List[RequestLine]:
        """List the lines of a request in insertion order."""
        models = RequestLineModel.objects.filter(calculation_request_id=request_id).order_by(
            "created_at"
        )
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def count(self, request_id: uuid.UUID) -> int:
        """Count the lines of a request."""
        return RequestLineModel.objects.filter(calculation_request_id=request_id).count()

    @sync_to_async
    def count_priced(self, request_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, int]:
        """
        Count lines with a positive sub-total per request.

        Returns:
            Mapping of request ID to count; requests without lines are omitted
        """
        rows = (
            RequestLineModel.objects.filter(calculation_request_id__in=list(request_ids))
            .values("calculation_request_id")
            .annotate(
                priced=Count("id", filter=Q(sub_total__gt=0, service__is_deleted=False))
            )
            .order_by()
        )
        return {row["calculation_request_id"]: row["priced"] for row in rows}

    @sync_to_async
    def remove_from_draft(self, request_id: uuid.UUID, service_id: uuid.UUID) -> bool:
        """Remove a line while the request is a draft."""
        deleted, _ = self._pair(request_id, service_id).filter(
            calculation_request__status=RequestStatus.DRAFT.value
        ).delete()
        return deleted > 0

    @sync_to_async
    def update_coefficient(
        self,
        request_id: uuid.UUID,
        service_id: uuid.UUID,
        coefficient: Decimal,
        allowed_statuses: Iterable[RequestStatus],
    ) -> bool:
        """Change a line's support coefficient if the request is in an allowed status."""
        updated = self._pair(request_id, service_id).filter(
            calculation_request__status__in=[status.value for status in allowed_statuses]
        ).update(support_coefficient=coefficient, updated_at=timezone.now())
        return updated > 0

    @sync_to_async
    def set_sub_total(
        self,
        request_id: uuid.UUID,
        service_id: uuid.UUID,
        sub_total: Decimal,
        pricing_status: PricingStatus,
    ) -> bool:
        """Write one line's sub-total without touching any other line."""
        priced_at = timezone.now() if pricing_status == PricingStatus.PRICED else None
        updated = self._pair(request_id, service_id).update(
            sub_total=sub_total,
            pricing_status=pricing_status.value,
            priced_at=priced_at,
            updated_at=timezone.now(),
        )
        return updated > 0

    @sync_to_async
    def mark_pricing_status(
        self,
        request_id: uuid.UUID,
        service_id: uuid.UUID,
        pricing_status: PricingStatus,
    ) -> bool:
        """Record the pricing state of a line."""
        updated = self._pair(request_id, service_id).update(
            pricing_status=pricing_status.value,
            updated_at=timezone.now(),
        )
        return updated > 0

    @sync_to_async
    def find_awaiting_pricing(
        self, request_id: Optional[uuid.UUID] = None
    ) -> List[RequestLine]:
        """Lines of completed requests that are still pending or failed."""
        queryset = RequestLineModel.objects.filter(
            calculation_request__status=RequestStatus.COMPLETED.value,
            pricing_status__in=[PricingStatus.PENDING.value, PricingStatus.FAILED.value],
            service__is_deleted=False,
        )
        if request_id is not None:
            queryset = queryset.filter(calculation_request_id=request_id)
        return [self._to_domain(model) for model in queryset.order_by("created_at")]
