"""
UpdateRequestParametersCommand.

Command to change usage parameters of a draft request.
"""
import uuid
from dataclasses import dataclass
from typing import Optional

from core.domain.value_objects import Actor


@dataclass
class UpdateRequestParametersCommand:
    """Sparse update of users, cores and period. None means not provided."""

    actor: Actor
    request_id: uuid.UUID
    users: Optional[int] = None
    cores: Optional[int] = None
    period: Optional[int] = None
