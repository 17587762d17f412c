"""
Quotation domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
from decimal import ROUND_HALF_UP, Decimal

from catalog.domain.license_service import LicenseService
from core.domain.value_objects import CENT, LicenseType, UsageParameters
from quotations.domain.request_line import RequestLine


class CostCalculator:
    """
    Domain service for line pricing.

    This is the reference formula an external pricer is expected
    to reproduce.
    """

    @staticmethod
    def quantity(license_type, parameters: UsageParameters) -> int:
        """
        Billable quantity for a license type.

        Args:
            license_type: LicenseType or its string value
            parameters: Request usage parameters

        Returns:
            users for per_user, cores for per_core, period for subscription, else 1
        """
        value = license_type.value if isinstance(license_type, LicenseType) else license_type
        if value == LicenseType.PER_USER.value:
            return parameters.users
        if value == LicenseType.PER_CORE.value:
            return parameters.cores
        if value == LicenseType.SUBSCRIPTION.value:
            return parameters.period
        return 1

    @staticmethod
    def sub_total(
        base_price: Decimal,
        license_type,
        support_coefficient: Decimal,
        parameters: UsageParameters,
    ) -> Decimal:
        """
        Compute base price x quantity x support coefficient.

        Returns:
            Sub-total rounded half-up to cents
        """
        quantity = CostCalculator.quantity(license_type, parameters)
        raw = Decimal(base_price) * quantity * Decimal(support_coefficient)
        return raw.quantize(CENT, rounding=ROUND_HALF_UP)

    @staticmethod
    def price_line(
        line: RequestLine, service: LicenseService, parameters: UsageParameters
    ) -> Decimal:
        """Sub-total of a line against its catalog entry."""
        return CostCalculator.sub_total(
            service.base_price,
            service.license_type,
            line.support_coefficient,
            parameters,
        )

