from .ranking_repository import RankingRepository


__all__ = ["RankingRepository"]
