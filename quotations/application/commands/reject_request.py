"""
RejectRequestCommand.

Command to reject a formed request.
"""
import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class RejectRequestCommand:
    """Command to move a request from formed to rejected."""

    actor: Actor
    request_id: uuid.UUID
