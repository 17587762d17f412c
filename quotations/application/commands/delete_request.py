"""
DeleteRequestCommand.

Command to soft-delete a draft request.
"""
import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class DeleteRequestCommand:
    """Command to move a request from draft to deleted."""

    actor: Actor
    request_id: uuid.UUID
