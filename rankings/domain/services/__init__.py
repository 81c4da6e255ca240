from .ranking_service import RankingService
from .side_effects import best_effort_ranking

__all__ = ["RankingService", "best_effort_ranking"]
