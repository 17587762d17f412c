"""
FormatRequestCommand.

Command to submit a draft request for moderation.
"""
import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class FormatRequestCommand:
    """Command to move a request from draft to formed."""

    actor: Actor
    request_id: uuid.UUID
