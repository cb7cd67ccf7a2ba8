"""Domain errors raised by the service layer."""


class SocialError(RuntimeError):
    """Base class for expected, user-facing service failures."""


class NotFoundError(SocialError):
    """Raised when an operation references a record that does not exist."""


class ConflictError(SocialError):
    """Raised when a create would duplicate an existing record."""


class InvalidOperationError(SocialError):
    """Raised when a well-formed request is not allowed in the current state."""
