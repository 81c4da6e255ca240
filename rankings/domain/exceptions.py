class RankingError(Exception):
    """Base class for ranking store exceptions."""

    pass


class RankingConflictError(RankingError):
    """Raised when a score entry already exists for the (user, category) pair."""

    pass


class RankingNotFoundError(RankingError):
    """Raised when updating a score entry that does not exist."""

    pass


class InvalidRankingCategoryError(RankingError):
    """Raised when a category outside the closed set is requested."""

    pass
