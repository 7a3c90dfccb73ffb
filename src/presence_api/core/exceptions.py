class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(ValidationError):
    """Raised when a unique value (email, full name) is already taken."""


class AuthenticationError(DomainError):
    """Raised when the caller's identity cannot be established."""


class InvalidCredentialsError(AuthenticationError):
    """Raised when a password does not verify."""


class InvalidTokenError(AuthenticationError):
    """Raised when a token is missing, malformed, tampered with or expired."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ForbiddenError(AuthorizationError):
    """Raised when a user touches a resource owned by someone else."""


class NotFoundError(DomainError):
    """Raised when a referenced user or record does not exist."""


class DuplicateError(DomainError):
    """Raised when a user already has an attendance record for the day."""


class NoCheckInError(DomainError):
    """Raised when checking out without an open check-in for the day."""


class InternalError(DomainError):
    """Raised when a collaborator (store, mailer) fails unexpectedly."""
