"""
Caller identity for API views.

Django auth authenticates the user; this module turns the user into the
request-scoped Actor the application handlers expect.
"""
from rest_framework.request import Request

from core.domain.exceptions import UnauthorizedError
from core.domain.value_objects import Actor


def actor_from_request(request: Request) -> Actor:
    """
    Build the Actor for an authenticated request.

    Raises:
        UnauthorizedError: If the caller is anonymous
    """
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        raise UnauthorizedError("Authentication credentials were not provided")
    return Actor.from_user(user)
