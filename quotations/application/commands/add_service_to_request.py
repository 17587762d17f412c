"""
AddServiceToRequestCommand.

Command to add a catalog entry to the caller's draft request.
"""
import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class AddServiceToRequestCommand:
    """Command to add a service to the actor's draft, creating it if needed."""

    actor: Actor
    service_id: uuid.UUID
