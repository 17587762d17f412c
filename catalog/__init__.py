"""
Catalog module - license service definitions.

This module handles:
- LicenseService entity and domain logic
- LicenseService repository (port)
- Catalog infrastructure (Django ORM adapters)
"""
