"""
RankingService - Score adjustment and leaderboards

Applies deltas to per-user, per-category scores and turns engagement and
order outcomes into deltas according to the configured policy.

Adjustments run inside a transaction with the score row locked, and a
concurrent first-touch insert is retried once as an update, so sequential
and concurrent deltas both accumulate instead of overwriting each other.
"""

import logging
from typing import Dict, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from rankings.domain.exceptions import InvalidRankingCategoryError, RankingConflictError
from rankings.domain.models import UserRanking
from rankings.domain.repositories import RankingRepository
from rankings.infra.observability.metrics import ranking_adjustment_delta, ranking_adjustments_total
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

User = get_user_model()
logger = logging.getLogger(__name__)

DEFAULT_ENGAGEMENT_WEIGHTS = {
    "reaction": 1,
    "comment": 3,
    "reshare": 5,
}

DEFAULT_ORDER_POLICY = {
    "sales_success_rate": 0.10,
    "sales_failure_rate": 0.05,
    "reputation_success": 5,
    "reputation_failure": -10,
}


class RankingService(BaseService):
    """
    Service for reading and adjusting user rankings.

    Dependencies:
    - RankingRepository: persistence of score entries (injected)
    """

    def __init__(self, ranking_repository: RankingRepository = None):
        super().__init__()
        self.ranking_repository = ranking_repository or RankingRepository()
        self.engagement_weights = getattr(settings, "RANKING_ENGAGEMENT_WEIGHTS", DEFAULT_ENGAGEMENT_WEIGHTS)
        self.order_policy = getattr(settings, "RANKING_ORDER_POLICY", DEFAULT_ORDER_POLICY)

    @BaseService.log_performance
    def adjust_ranking(self, user_id, category: str, delta: float, actor_id=None) -> ServiceResult[UserRanking]:
        """
        Add ``delta`` to the user's score in ``category``.

        The entry is created with ``score = delta`` on first touch.

        Example:
            >>> result = ranking_service.adjust_ranking(seller.id, "reputation", 5, actor_id=buyer.id)
            >>> result.value.score
            5.0
        """
        if not UserRanking.is_valid_category(category):
            return service_err(ErrorCodes.INVALID_RANKING_CATEGORY, f"Unknown ranking category '{category}'")

        try:
            with transaction.atomic():
                ranking = self._apply_delta(user_id, category, delta, actor_id)

            ranking_adjustments_total.labels(category=category, status="success").inc()
            ranking_adjustment_delta.observe(abs(delta))
            self.logger.info(
                f"Adjusted ranking: user={user_id}, category={category}, delta={delta}, score={ranking.score}"
            )
            return service_ok(ranking)

        except Exception as e:
            ranking_adjustments_total.labels(category=category, status="failure").inc()
            self.logger.error(f"Error adjusting ranking for user {user_id} in {category}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def _apply_delta(self, user_id, category: str, delta: float, actor_id) -> UserRanking:
        existing = self.ranking_repository.find(user_id, category, for_update=True)
        if existing is not None:
            return self.ranking_repository.update(user_id, category, existing.score + delta, actor_id)

        try:
            return self.ranking_repository.create(user_id, category, delta, actor_id)
        except RankingConflictError:
            # Lost the first-touch race; the row exists now
            existing = self.ranking_repository.find(user_id, category, for_update=True)
            return self.ranking_repository.update(user_id, category, existing.score + delta, actor_id)

    @BaseService.log_performance
    def set_ranking(self, user_id, category: str, score: float, actor_id=None) -> ServiceResult[UserRanking]:
        """Set an absolute score, creating the entry when needed."""
        if not UserRanking.is_valid_category(category):
            return service_err(ErrorCodes.INVALID_RANKING_CATEGORY, f"Unknown ranking category '{category}'")

        try:
            with transaction.atomic():
                if self.ranking_repository.find(user_id, category, for_update=True) is None:
                    try:
                        ranking = self.ranking_repository.create(user_id, category, score, actor_id)
                    except RankingConflictError:
                        ranking = self.ranking_repository.update(user_id, category, score, actor_id)
                else:
                    ranking = self.ranking_repository.update(user_id, category, score, actor_id)

            self.logger.info(f"Set ranking: user={user_id}, category={category}, score={score}")
            return service_ok(ranking)

        except Exception as e:
            self.logger.error(f"Error setting ranking for user {user_id} in {category}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def apply_post_engagement_ranking(self, owner_id, kind: str, count: int = 1) -> ServiceResult[UserRanking]:
        """
        Reward a content owner for engagement on their content.

        Negative ``count`` compensates a removed engagement.
        """
        weight = self.engagement_weights.get(kind)
        if weight is None:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Unknown engagement kind '{kind}'")

        return self.adjust_ranking(owner_id, UserRanking.CATEGORY_CONTENT, weight * count)

    def apply_order_completion_ranking(
        self, seller_id, buyer_id, order_value, was_successful: bool = True
    ) -> ServiceResult[Dict]:
        """
        Adjust the seller's sales and reputation scores for an order outcome.

        Args:
            seller_id: Seller being ranked
            buyer_id: Recorded as the actor of both updates
            order_value: Order total (Decimal or float)
            was_successful: True for a completed order, False for a failed one

        Returns:
            ServiceResult with {"sales": UserRanking, "reputation": UserRanking}
        """
        order_value = float(order_value)
        if was_successful:
            sales_delta = order_value * self.order_policy["sales_success_rate"]
            reputation_delta = self.order_policy["reputation_success"]
        else:
            sales_delta = -order_value * self.order_policy["sales_failure_rate"]
            reputation_delta = self.order_policy["reputation_failure"]

        sales_result = self.adjust_ranking(seller_id, UserRanking.CATEGORY_SALES, sales_delta, buyer_id)
        if not sales_result.ok:
            return sales_result

        reputation_result = self.adjust_ranking(seller_id, UserRanking.CATEGORY_REPUTATION, reputation_delta, buyer_id)
        if not reputation_result.ok:
            return reputation_result

        self.logger.info(f"Applied order completion ranking for seller {seller_id} (successful={was_successful})")
        return service_ok({"sales": sales_result.value, "reputation": reputation_result.value})

    def get_categories(self) -> List[Dict]:
        return [
            {"name": value, "label": label, "description": UserRanking.CATEGORY_DESCRIPTIONS[value]}
            for value, label in UserRanking.CATEGORY_CHOICES
        ]

    def get_user_rankings(self, user_id) -> ServiceResult[List[UserRanking]]:
        try:
            return service_ok(self.ranking_repository.list_for_user(user_id))
        except Exception as e:
            self.logger.error(f"Error getting rankings for user {user_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def get_user_ranking_summary(self, user_id) -> ServiceResult[Dict]:
        try:
            return service_ok(self.ranking_repository.summary_for_user(user_id))
        except Exception as e:
            self.logger.error(f"Error getting ranking summary for user {user_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def get_top_users_by_category(self, category: str, limit: Optional[int] = None) -> ServiceResult[List[UserRanking]]:
        limit = limit or getattr(settings, "RANKING_TOP_DEFAULT_LIMIT", 10)
        try:
            return service_ok(self.ranking_repository.top_by_category(category, limit))
        except InvalidRankingCategoryError as e:
            return service_err(ErrorCodes.INVALID_RANKING_CATEGORY, str(e))
        except Exception as e:
            self.logger.error(f"Error getting top users for {category}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def get_top_users(self, limit: Optional[int] = None) -> ServiceResult[List[Dict]]:
        """
        Leaderboard across all categories.

        Each entry carries the user, the summed score and the user's
        per-category rankings.
        """
        limit = limit or getattr(settings, "RANKING_TOP_DEFAULT_LIMIT", 10)
        try:
            top = self.ranking_repository.top_overall(limit)
            users = User.objects.in_bulk([row["user_id"] for row in top])

            leaderboard = [
                {
                    "user": users.get(row["user_id"]),
                    "total_score": row["total_score"],
                    "rankings": self.ranking_repository.list_for_user(row["user_id"]),
                }
                for row in top
            ]
            return service_ok(leaderboard)

        except Exception as e:
            self.logger.error(f"Error getting top users: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
