"""Domain errors raised by services and translated to HTTP responses in main."""


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class InactiveEmployeeError(AuthorizationError):
    """Raised when a deactivated employee tries to sign in."""


class NotFoundError(DomainError):
    """Raised when a referenced employee or record does not exist."""


class StorageError(DomainError):
    pass


class StorageConflict(StorageError):
    """A concurrent write won: unique (employee, day) index or stale record version."""


class StorageUnavailable(StorageError):
    """The document store could not be reached or rejected the operation."""
