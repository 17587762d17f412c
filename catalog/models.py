"""
Model registration for the catalog app.
"""
from catalog.infrastructure.models import LicenseService  # noqa: F401
