class DomainError(Exception):
    """Base exception for business rule violations."""

    category = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    category = "validation_error"


class AuthenticationError(DomainError):
    """Raised when the caller's credential is missing, invalid or expired."""

    category = "authentication_error"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    category = "authorization_error"


class NotFoundError(DomainError):
    """Raised when the requested resource does not exist."""

    category = "not_found"


class ConflictError(DomainError):
    """Raised when a write collides with existing state (e.g. duplicate daily report)."""

    category = "conflict"


class ExpiredOrInvalidTokenError(DomainError):
    """Raised when a one-time code or reset token does not validate.

    The message never says whether the code was wrong, expired or already used.
    """

    category = "invalid_or_expired_token"
