from .ranking_views import RankingViewSet

__all__ = ["RankingViewSet"]
