"""
Pricing configuration.

Read from Django settings at call time so overrides apply per test.
"""
from dataclasses import dataclass

from django.conf import settings

DEFAULT_AUTHENTICATOR = "pricing.infrastructure.authenticators.SharedSecretAuthenticator"


@dataclass(frozen=True)
class PricingSettings:
    """Snapshot of the pricing settings."""

    service_url: str
    callback_base_url: str
    shared_secret: str
    dispatch_timeout: float
    max_retries: int
    authenticator_path: str

    @property
    def synchronous(self) -> bool:
        """Without an external pricer, sub-totals are computed in-process."""
        return not self.service_url


def get_pricing_settings() -> PricingSettings:
    """Build a PricingSettings snapshot from Django settings."""
    return PricingSettings(
        service_url=getattr(settings, "PRICING_SERVICE_URL", ""),
        callback_base_url=getattr(
            settings, "PRICING_CALLBACK_BASE_URL", "http://localhost:8080"
        ).rstrip("/"),
        shared_secret=getattr(settings, "PRICING_SHARED_SECRET", "license-async-key"),
        dispatch_timeout=float(getattr(settings, "PRICING_DISPATCH_TIMEOUT", 5)),
        max_retries=int(getattr(settings, "PRICING_MAX_RETRIES", 3)),
        authenticator_path=getattr(
            settings, "PRICING_CALLBACK_AUTHENTICATOR", DEFAULT_AUTHENTICATOR
        ),
    )
