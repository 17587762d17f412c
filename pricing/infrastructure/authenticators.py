"""
Callback authenticator implementations.

Uses constant-time comparison for every credential check.
"""
import hashlib
import hmac
import secrets
import uuid
from typing import Optional

from django.utils.module_loading import import_string

from pricing.config import get_pricing_settings
from pricing.ports.callback_authenticator import CallbackAuthenticator


class SharedSecretAuthenticator(CallbackAuthenticator):
    """
    Static shared secret.

    Every task carries the same secret and every callback must present it.
    """

    def __init__(self, secret: str):
        """Initialize with the shared secret."""
        if not secret:
            raise ValueError("Shared secret cannot be empty")
        self.secret = secret

    def issue(self, request_id: uuid.UUID, service_id: uuid.UUID) -> str:
        return self.secret

    def verify(
        self, credential: Optional[str], request_id: uuid.UUID, service_id: uuid.UUID
    ) -> bool:
        if not credential:
            return False
        return secrets.compare_digest(credential.encode(), self.secret.encode())


class SignedTaskTokenAuthenticator(CallbackAuthenticator):
    """
    Per-task HMAC token.

    The token signs the (request, service) pair, so a leaked token cannot
    be replayed against another line.
    """

    def __init__(self, secret: str):
        """Initialize with the signing key."""
        if not secret:
            raise ValueError("Signing key cannot be empty")
        self.secret = secret

    def issue(self, request_id: uuid.UUID, service_id: uuid.UUID) -> str:
        message = f"{request_id}:{service_id}".encode()
        return hmac.new(self.secret.encode(), message, hashlib.sha256).hexdigest()

    def verify(
        self, credential: Optional[str], request_id: uuid.UUID, service_id: uuid.UUID
    ) -> bool:
        if not credential:
            return False
        expected = self.issue(request_id, service_id)
        return hmac.compare_digest(expected, credential)


def get_callback_authenticator() -> CallbackAuthenticator:
    """Instantiate the authenticator configured in PRICING_CALLBACK_AUTHENTICATOR."""
    pricing_settings = get_pricing_settings()
    authenticator_class = import_string(pricing_settings.authenticator_path)
    return authenticator_class(secret=pricing_settings.shared_secret)
