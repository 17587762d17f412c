"""
DeleteLicenseServiceCommand.
"""
import uuid
from dataclasses import dataclass

from core.domain.value_objects import Actor


@dataclass
class DeleteLicenseServiceCommand:
    """Command to soft-delete a catalog entry."""

    actor: Actor
    service_id: uuid.UUID
