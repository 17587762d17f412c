"""
ListLicenseServicesQuery.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class ListLicenseServicesQuery:
    """Query to list live catalog entries, optionally searching by name."""

    query: Optional[str] = None
