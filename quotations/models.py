"""
Model registration for the quotations app.
"""
from quotations.infrastructure.models import (  # noqa: F401
    LicenseCalculationRequest,
    RequestLine,
)
