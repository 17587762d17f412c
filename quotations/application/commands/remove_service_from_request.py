"""
RemoveServiceFromRequestCommand.

Command to remove a catalog entry from a draft request.
"""
import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class RemoveServiceFromRequestCommand:
    """Command to remove a line from a draft request."""

    actor: Actor
    request_id: uuid.UUID
    service_id: uuid.UUID
