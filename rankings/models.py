from rankings.domain.models import UserRanking


__all__ = ["UserRanking"]
