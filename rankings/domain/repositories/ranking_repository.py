"""
RankingRepository - Score Entry persistence

Straight ORM queries over UserRanking. No business rules live here: the
repository only knows how to find, create, update and aggregate rows keyed
by (user, category).
"""

import logging
from typing import Dict, List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Sum

from rankings.domain.exceptions import InvalidRankingCategoryError, RankingConflictError, RankingNotFoundError
from rankings.domain.models import UserRanking

logger = logging.getLogger(__name__)


class RankingRepository:
    def __init__(self, model=UserRanking):
        self.model = model

    def _check_category(self, category: str) -> None:
        if not self.model.is_valid_category(category):
            raise InvalidRankingCategoryError(f"Unknown ranking category '{category}'")

    def find(self, user_id, category: str, for_update: bool = False) -> Optional[UserRanking]:
        """Point lookup; absence is returned as None, never raised."""
        self._check_category(category)
        queryset = self.model.objects.select_related("user")
        if for_update:
            queryset = queryset.select_for_update()
        return queryset.filter(user_id=user_id, category=category).first()

    def create(self, user_id, category: str, initial_score: float, actor_id=None) -> UserRanking:
        self._check_category(category)
        try:
            with transaction.atomic():
                return self.model.objects.create(
                    user_id=user_id,
                    category=category,
                    score=initial_score,
                    updated_by_id=actor_id or user_id,
                )
        except IntegrityError as e:
            raise RankingConflictError(f"Ranking for user {user_id} in '{category}' already exists") from e

    def update(self, user_id, category: str, new_score: float, actor_id=None) -> UserRanking:
        ranking = self.find(user_id, category)
        if ranking is None:
            raise RankingNotFoundError(f"No ranking for user {user_id} in '{category}'")

        ranking.score = new_score
        ranking.updated_by_id = actor_id or user_id
        ranking.save(update_fields=["score", "updated_by", "updated_at"])
        return ranking

    def list_for_user(self, user_id) -> List[UserRanking]:
        return list(self.model.objects.filter(user_id=user_id).order_by("-score", "category"))

    def top_by_category(self, category: str, limit: int = 10) -> List[UserRanking]:
        self._check_category(category)
        return list(self.model.objects.filter(category=category).select_related("user").order_by("-score")[:limit])

    def top_overall(self, limit: int = 10) -> List[Dict]:
        """
        Sum scores per user across all categories.

        Ties on the aggregate are broken by user id ascending so that the
        ordering is stable between calls.
        """
        rows = (
            self.model.objects.values("user_id")
            .annotate(total_score=Sum("score"))
            .order_by("-total_score", "user_id")[:limit]
        )
        return [{"user_id": row["user_id"], "total_score": row["total_score"]} for row in rows]

    def summary_for_user(self, user_id) -> Dict:
        rankings = self.list_for_user(user_id)
        total_score = sum(ranking.score for ranking in rankings)
        ranking_count = len(rankings)

        return {
            "user_id": user_id,
            "total_score": total_score,
            "ranking_count": ranking_count,
            "average_score": total_score / ranking_count if ranking_count else 0,
            "rankings": rankings,
        }
