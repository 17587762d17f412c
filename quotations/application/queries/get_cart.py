"""
GetCartQuery.

Query to get the caller's current draft summary.
"""
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class GetCartQuery:
    """Query to get the actor's draft id and line count."""

    actor: Actor
