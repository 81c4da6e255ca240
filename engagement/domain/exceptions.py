class EngagementError(Exception):
    """Base class for engagement store exceptions."""

    pass


class DuplicateReactionError(EngagementError):
    """Raised when a user reacts twice to the same content."""

    pass
