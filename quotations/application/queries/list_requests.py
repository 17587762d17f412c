"""
ListRequestsQuery.

Query to list calculation requests with optional filters.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional

from core.domain.value_objects import Actor, RequestStatus


@dataclass
class ListRequestsQuery:
    """Query to list requests. Buyers only see their own."""

    actor: Actor
    status: Optional[RequestStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
