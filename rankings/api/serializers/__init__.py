from .ranking_serializers import (
    LeaderboardEntrySerializer,
    RankingCategorySerializer,
    RankingEntrySerializer,
    RankingSummarySerializer,
    UpdateRankingRequestSerializer,
    UserRankingSerializer,
)


__all__ = [
    "LeaderboardEntrySerializer",
    "RankingCategorySerializer",
    "RankingEntrySerializer",
    "RankingSummarySerializer",
    "UpdateRankingRequestSerializer",
    "UserRankingSerializer",
]
