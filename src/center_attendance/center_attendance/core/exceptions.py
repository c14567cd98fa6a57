from . import constants


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class CollisionError(DomainError):
    """Raised when an attendance code is already active for another owner."""

    def __init__(self, message: str = constants.MSG_CODE_IN_USE):
        super().__init__(message)


class AlreadyProcessedError(DomainError):
    """Raised on a duplicate check-in or check-out. Not a system fault."""


class NotFoundError(DomainError):
    """Raised when a code or entity resolves to nothing."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DuplicateRecordError(Exception):
    """Raised by repositories when a unique key is violated on write."""
