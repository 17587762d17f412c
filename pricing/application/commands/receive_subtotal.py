"""
ReceiveSubtotalCommand.

Command carrying a priced sub-total for one request line.
"""
import uuid
from dataclasses import dataclass
from decimal import Decimal


@dataclass
class ReceiveSubtotalCommand:
    """Command to apply a pricer's sub-total to a (request, service) line."""

    request_id: uuid.UUID
    service_id: uuid.UUID
    sub_total: Decimal
