"""
GetRequestQuery.

Query to get one calculation request with its lines.
"""
import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class GetRequestQuery:
    """Query to get request detail."""

    actor: Actor
    request_id: uuid.UUID
