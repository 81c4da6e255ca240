from .ranking import UserRanking


__all__ = ["UserRanking"]
