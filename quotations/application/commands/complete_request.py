"""
CompleteRequestCommand.

Command to approve a formed request and dispatch its pricing.
"""
import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class CompleteRequestCommand:
    """Command to move a request from formed to completed."""

    actor: Actor
    request_id: uuid.UUID
