"""
GetLicenseServiceQuery.
"""
import uuid
from dataclasses import dataclass


@dataclass
class GetLicenseServiceQuery:
    """Query to fetch one live catalog entry."""

    service_id: uuid.UUID
