"""
Callback authenticator port (interface).

Issues the credential carried by an outbound pricing task and checks the
credential presented by the pricer's callback. The dispatcher and the
ingestion handler only talk to this interface.
"""
import uuid
from abc import ABC, abstractmethod
from typing import Optional


class CallbackAuthenticator(ABC):
    """Abstract authenticator for pricing callbacks."""

    header_name = "X-Async-Key"

    @abstractmethod
    def issue(self, request_id: uuid.UUID, service_id: uuid.UUID) -> str:
        """
        Issue the credential for one (request, service) task.

        Args:
            request_id: Request UUID
            service_id: Catalog entry UUID

        Returns:
            Credential the pricer must echo back
        """
        pass

    @abstractmethod
    def verify(
        self, credential: Optional[str], request_id: uuid.UUID, service_id: uuid.UUID
    ) -> bool:
        """
        Check a callback credential.

        Args:
            credential: Value of the callback header, None if absent
            request_id: Request UUID from the callback path
            service_id: Catalog entry UUID from the callback path

        Returns:
            True if the credential is valid for this pair
        """
        pass
