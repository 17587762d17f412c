"""
PricingTask value object.

Everything an external pricer needs to price one request line and
report back.
"""
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from catalog.domain.license_service import LicenseService
from core.domain.value_objects import UsageParameters, ValueObject
from quotations.domain.calculation_request import LicenseCalculationRequest
from quotations.domain.request_line import RequestLine


@dataclass(frozen=True)
class PricingTask(ValueObject):
    """One unit of pricing work for a (request, service) pair."""

    request_id: uuid.UUID
    service_id: uuid.UUID
    license_type: str
    base_price: Decimal
    support_coefficient: Decimal
    users: int
    cores: int
    period: int
    callback_url: str
    secret_key: str

    @classmethod
    def build(
        cls,
        request: LicenseCalculationRequest,
        line: RequestLine,
        service: LicenseService,
        callback_url: str,
        secret_key: str,
    ) -> "PricingTask":
        """
        Build a task from a request, one of its lines and the line's catalog entry.

        Returns:
            PricingTask instance
        """
        return cls(
            request_id=request.id,
            service_id=line.service_id,
            license_type=service.license_type.value,
            base_price=service.base_price,
            support_coefficient=line.support_coefficient,
            users=request.users,
            cores=request.cores,
            period=request.period,
            callback_url=callback_url,
            secret_key=secret_key,
        )

    @property
    def parameters(self) -> UsageParameters:
        return UsageParameters(users=self.users, cores=self.cores, period=self.period)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe payload sent to the queue and to the external pricer."""
        return {
            "request_id": str(self.request_id),
            "service_id": str(self.service_id),
            "license_type": self.license_type,
            "base_price": float(self.base_price),
            "support_coefficient": float(self.support_coefficient),
            "users": self.users,
            "cores": self.cores,
            "period": self.period,
            "callback_url": self.callback_url,
            "secret_key": self.secret_key,
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PricingTask":
        """Rebuild a task from its payload."""
        return cls(
            request_id=uuid.UUID(str(payload["request_id"])),
            service_id=uuid.UUID(str(payload["service_id"])),
            license_type=payload["license_type"],
            base_price=Decimal(str(payload["base_price"])),
            support_coefficient=Decimal(str(payload["support_coefficient"])),
            users=int(payload["users"]),
            cores=int(payload["cores"]),
            period=int(payload["period"]),
            callback_url=payload["callback_url"],
            secret_key=payload["secret_key"],
        )
