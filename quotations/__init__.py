"""
Quotations module - license calculation requests.

This module handles:
- LicenseCalculationRequest aggregate and its lifecycle
- RequestLine association and cost recalculation
- Request repositories (ports) and Django ORM adapters
"""
