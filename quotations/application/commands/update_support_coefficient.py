"""
UpdateSupportCoefficientCommand.

Command to change the support coefficient of one request line.
"""
import uuid
from dataclasses import dataclass
from decimal import Decimal

from core.domain.value_objects import Actor


@dataclass
class UpdateSupportCoefficientCommand:
    """Command to change a line's support coefficient (clamped to bounds)."""

    actor: Actor
    request_id: uuid.UUID
    service_id: uuid.UUID
    support_coefficient: Decimal
