"""
Django implementation of CalculationRequestRepository port.

Status transitions are compare-and-set updates: the row is only written
while it still carries the status the caller read.
"""
import uuid
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from asgiref.sync import sync_to_async
from django.db import IntegrityError, models, transaction
from django.db.models import OuterRef, Subquery, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.domain.value_objects import PricingStatus, RequestStatus, UsageParameters
from quotations.domain.calculation_request import LicenseCalculationRequest
from quotations.infrastructure.models import (
    LicenseCalculationRequest as RequestModel,
    RequestLine as RequestLineModel,
)
from quotations.ports.calculation_request_repository import CalculationRequestRepository

MONEY = models.DecimalField(max_digits=14, decimal_places=2)


class DjangoCalculationRequestRepository(CalculationRequestRepository):
    """
    Django ORM implementation of CalculationRequestRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Guards every status write with the expected current status
    3. Recomputes totals in a single aggregate UPDATE
    """

    def _visible(self):
        """Queryset of requests that are not soft-deleted."""
        return RequestModel.objects.exclude(status=RequestStatus.DELETED.value)

    def _to_domain(self, model: RequestModel) -> LicenseCalculationRequest:
        """
        Convert Django model to domain entity.

        Args:
            model: Django LicenseCalculationRequest model

        Returns:
            LicenseCalculationRequest domain entity
        """
        return LicenseCalculationRequest(
            id=model.id,
            creator_id=model.creator_id,
            status=RequestStatus(model.status),
            parameters=UsageParameters(
                users=model.users,
                cores=model.cores,
                period=model.period,
            ),
            total_cost=model.total_cost,
            created_at=model.created_at,
            moderator_id=model.moderator_id,
            formatted_at=model.formatted_at,
            completed_at=model.completed_at,
        )

    @sync_to_async
    def get_or_create_draft(
        self, creator_id: int
    ) -> Tuple[LicenseCalculationRequest, bool]:
        """
        Return the creator's draft, creating one if none exists.

        The partial unique constraint on (creator, status=draft) turns a
        concurrent double-create into a lookup of the winner's row.
        """
        existing = RequestModel.objects.filter(
            creator_id=creator_id, status=RequestStatus.DRAFT.value
        ).first()
        if existing:
            return self._to_domain(existing), False

        draft = LicenseCalculationRequest.create_draft(creator_id)
        try:
            with transaction.atomic():
                model = RequestModel.objects.create(
                    id=draft.id,
                    creator_id=creator_id,
                    status=draft.status.value,
                    users=draft.users,
                    cores=draft.cores,
                    period=draft.period,
                    total_cost=draft.total_cost,
                    created_at=draft.created_at,
                )
        except IntegrityError:
            model = RequestModel.objects.get(
                creator_id=creator_id, status=RequestStatus.DRAFT.value
            )
            return self._to_domain(model), False
        return self._to_domain(model), True

    @sync_to_async
    def find_by_id(self, request_id: uuid.UUID) -> Optional[LicenseCalculationRequest]:
        """
        Find a non-deleted request by ID.

        Args:
            request_id: Request UUID

        Returns:
            LicenseCalculationRequest or None if missing or deleted
        """
        try:
            return self._to_domain(self._visible().get(id=request_id))
        except RequestModel.DoesNotExist:
            return None

    @sync_to_async
    def find_draft(self, creator_id: int) -> Optional[LicenseCalculationRequest]:
        """Find the creator's current draft."""
        model = RequestModel.objects.filter(
            creator_id=creator_id, status=RequestStatus.DRAFT.value
        ).first()
        return self._to_domain(model) if model else None

    @sync_to_async
    def list_requests(
        self,
        creator_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[LicenseCalculationRequest]:
        """
        List non-deleted requests, newest first.

        Date filters apply to the formatted timestamp.
        """
        queryset = self._visible()
        if creator_id is not None:
            queryset = queryset.filter(creator_id=creator_id)
        if status is not None:
            queryset = queryset.filter(status=status.value)
        if date_from is not None:
            queryset = queryset.filter(formatted_at__date__gte=date_from)
        if date_to is not None:
            queryset = queryset.filter(formatted_at__date__lte=date_to)
        return [self._to_domain(model) for model in queryset.order_by("-created_at")]

    @sync_to_async
    def update_parameters(
        self,
        request: LicenseCalculationRequest,
        line_prices: Optional[Dict[uuid.UUID, Tuple[Decimal, PricingStatus]]] = None,
    ) -> bool:
        """
        Persist usage parameters if the request is still a draft.

        The parameters, the given line prices and the re-summed total are
        written in one transaction.

        Returns:
            True if written, False if the request is no longer a draft
        """
        now = timezone.now()
        with transaction.atomic():
            updated = RequestModel.objects.filter(
                id=request.id, status=RequestStatus.DRAFT.value
            ).update(
                users=request.users,
                cores=request.cores,
                period=request.period,
                updated_at=now,
            )
            if updated != 1:
                return False

            for service_id, (sub_total, pricing_status) in (line_prices or {}).items():
                RequestLineModel.objects.filter(
                    calculation_request_id=request.id, service_id=service_id
                ).update(
                    sub_total=sub_total,
                    pricing_status=pricing_status.value,
                    priced_at=now if pricing_status == PricingStatus.PRICED else None,
                    updated_at=now,
                )
            _write_total(request.id)
        return True

    @sync_to_async
    def apply_transition(
        self,
        request: LicenseCalculationRequest,
        expected_status: RequestStatus,
        reset_lines_to: Optional[PricingStatus] = None,
    ) -> bool:
        """
        Persist a status transition with compare-and-set semantics.

        When reset_lines_to is given, line sub-totals and the total are
        zeroed in the same transaction as the status change, so no reader
        sees the new status next to stale sub-totals.
        """
        with transaction.atomic():
            updated = RequestModel.objects.filter(
                id=request.id, status=expected_status.value
            ).update(
                status=request.status.value,
                moderator_id=request.moderator_id,
                formatted_at=request.formatted_at,
                completed_at=request.completed_at,
                updated_at=timezone.now(),
            )
            if updated != 1:
                return False

            if reset_lines_to is not None:
                RequestLineModel.objects.filter(calculation_request_id=request.id).update(
                    sub_total=Decimal("0"),
                    pricing_status=reset_lines_to.value,
                    priced_at=None,
                    updated_at=timezone.now(),
                )
                RequestModel.objects.filter(id=request.id).update(total_cost=Decimal("0"))
        return True

    @sync_to_async
    def recalculate_total(self, request_id: uuid.UUID) -> Decimal:
        """
        Set total cost to the sum of sub-totals of lines with a live catalog entry.

        The sum is evaluated inside the UPDATE, so the last writer always
        stores a total that reflects every committed line.
        """
        return _write_total(request_id)


def _write_total(request_id: uuid.UUID) -> Decimal:
    live_sum = (
        RequestLineModel.objects.filter(
            calculation_request_id=OuterRef("pk"),
            service__is_deleted=False,
        )
        .order_by()
        .values("calculation_request_id")
        .annotate(total=Sum("sub_total"))
        .values("total")
    )
    RequestModel.objects.filter(id=request_id).update(
        total_cost=Coalesce(
            Subquery(live_sum, output_field=MONEY),
            Value(Decimal("0")),
            output_field=MONEY,
        )
    )
    total = (
        RequestModel.objects.filter(id=request_id)
        .values_list("total_cost", flat=True)
        .first()
    )
    return total if total is not None else Decimal("0")
