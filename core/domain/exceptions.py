"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidStateTransitionError(DomainException):
    """Raised when a lifecycle transition is not legal from the current status."""

    def __init__(self, message: str = "Invalid state transition"):
        super().__init__(message, code="INVALID_STATE_TRANSITION")


class InvalidStateError(DomainException):
    """Raised when an operation is not permitted in the current status."""

    def __init__(self, message: str = "Operation not permitted in current state"):
        super().__init__(message, code="INVALID_STATE")


class PreconditionFailedError(DomainException):
    """Raised when the preconditions of a transition are not met."""

    def __init__(self, message: str = "Precondition failed"):
        super().__init__(message, code="PRECONDITION_FAILED")


class ValidationFailedError(DomainException, ValueError):
    """Raised for malformed input or out-of-range values."""

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message, code="VALIDATION_FAILED")


class NotFoundError(DomainException):
    """Base exception for missing or soft-deleted resources."""

    def __init__(self, message: str = "Resource not found", code: str = "NOT_FOUND"):
        super().__init__(message, code=code)


class RequestNotFoundError(NotFoundError):
    """Raised when a calculation request is not found."""

    def __init__(self, message: str = "Calculation request not found"):
        super().__init__(message, code="REQUEST_NOT_FOUND")


class LineNotFoundError(NotFoundError):
    """Raised when a (request, service) line does not exist."""

    def __init__(self, message: str = "Request line not found"):
        super().__init__(message, code="LINE_NOT_FOUND")


class LicenseServiceNotFoundError(NotFoundError):
    """Raised when a catalog entry is not found."""

    def __init__(self, message: str = "License service not found"):
        super().__init__(message, code="LICENSE_SERVICE_NOT_FOUND")


class UnauthorizedError(DomainException):
    """Raised for missing credentials or a bad callback secret."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHORIZED")


class PermissionDeniedError(DomainException):
    """Raised when the caller's role does not allow the operation."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, code="PERMISSION_DENIED")


class DispatchFailedError(DomainException):
    """Raised when a pricing task cannot be handed to the pricer."""

    def __init__(self, message: str = "Pricing dispatch failed"):
        super().__init__(message, code="DISPATCH_FAILED")
