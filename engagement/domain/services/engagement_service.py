"""
EngagementService - Reactions, comments and reshares

Records engagement on content and rewards the content owner through the
RankingService. The ranking update is a best-effort side effect: once the
engagement write has succeeded, a ranking failure is logged and dropped.

Owner rewards are only applied when the caller names the owner and the
owner is not the acting user.
"""

from typing import Dict, Optional

from django.contrib.auth import get_user_model

from engagement.domain.exceptions import DuplicateReactionError
from engagement.domain.models import Engagement
from engagement.domain.repositories import EngagementRepository
from engagement.infra.observability.metrics import engagement_events_total, engagement_rejections_total
from rankings.domain.services import RankingService, best_effort_ranking
from utils.pagination import paginate
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

User = get_user_model()

MAX_CONTENT_ID_LENGTH = 64


class EngagementService(BaseService):
    """
    Service for engagement writes and reads.

    Dependencies:
    - EngagementRepository: persistence of engagement records
    - RankingService: owner rewards (best effort)
    """

    def __init__(self, engagement_repository: EngagementRepository, ranking_service: RankingService):
        super().__init__()
        self.engagement_repository = engagement_repository
        self.ranking_service = ranking_service

    # ===== Helpers =====

    def _validate_content(self, content_id: str, content_type: Optional[str] = None) -> Optional[ServiceResult]:
        if not content_id or len(content_id) > MAX_CONTENT_ID_LENGTH:
            return service_err(
                ErrorCodes.VALIDATION_ERROR, f"content_id must be 1-{MAX_CONTENT_ID_LENGTH} characters"
            )
        if content_type is not None and not content_type.strip():
            return service_err(ErrorCodes.VALIDATION_ERROR, "content_type is required")
        return None

    def _reward_owner(self, owner_id, actor: User, kind: str, count: int) -> None:
        if not owner_id or str(owner_id) == str(actor.id):
            return

        best_effort_ranking(
            f"engagement.{kind}",
            self.ranking_service.apply_post_engagement_ranking,
            owner_id,
            kind,
            count,
        )

    # ===== Writes =====

    @BaseService.log_performance
    def react(self, user: User, content_id: str, content_type: str, owner_id=None) -> ServiceResult[Engagement]:
        """
        Record a reaction; a user can react to a piece of content only once.

        Example:
            >>> result = engagement_service.react(user, "post-42", "Post", owner_id=author.id)
            >>> result.error  # second call
            'already_exists'
        """
        invalid = self._validate_content(content_id, content_type)
        if invalid:
            return invalid

        kind = Engagement.KIND_REACTION
        if self.engagement_repository.find_user_engagement(user.id, content_id, kind):
            engagement_rejections_total.labels(kind=kind, reason="duplicate").inc()
            return service_err(ErrorCodes.ALREADY_EXISTS, "User has already reacted to this content")

        try:
            reaction = self.engagement_repository.create(user.id, content_id, content_type, kind)
        except DuplicateReactionError as e:
            engagement_rejections_total.labels(kind=kind, reason="duplicate").inc()
            return service_err(ErrorCodes.ALREADY_EXISTS, str(e))
        except Exception as e:
            self.logger.error(f"Error creating reaction on {content_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        engagement_events_total.labels(kind=kind, action="created").inc()
        self._reward_owner(owner_id, user, kind, 1)
        return service_ok(reaction)

    @BaseService.log_performance
    def unreact(self, user: User, content_id: str, owner_id=None) -> ServiceResult[None]:
        kind = Engagement.KIND_REACTION
        reaction = self.engagement_repository.find_user_engagement(user.id, content_id, kind)
        if reaction is None:
            return service_err(ErrorCodes.NOT_FOUND, "Reaction not found")

        try:
            self.engagement_repository.delete(reaction)
        except Exception as e:
            self.logger.error(f"Error removing reaction on {content_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        engagement_events_total.labels(kind=kind, action="deleted").inc()
        self._reward_owner(owner_id, user, kind, -1)
        return service_ok()

    @BaseService.log_performance
    def comment(
        self, user: User, content_id: str, content_type: str, text: str, parent_id=None, owner_id=None
    ) -> ServiceResult[Engagement]:
        """
        Record a comment, optionally as a reply to another comment.

        Args:
            text: Comment body; must be non-empty after trimming
            parent_id: Comment being replied to (must exist)
            owner_id: Content owner to reward
        """
        invalid = self._validate_content(content_id, content_type)
        if invalid:
            return invalid

        kind = Engagement.KIND_COMMENT
        text = (text or "").strip()
        if not text:
            engagement_rejections_total.labels(kind=kind, reason="empty_text").inc()
            return service_err(ErrorCodes.VALIDATION_ERROR, "Comment content is required")

        if parent_id is not None and self.engagement_repository.get(parent_id, kind=kind) is None:
            return service_err(ErrorCodes.NOT_FOUND, f"Parent comment {parent_id} not found")

        try:
            comment = self.engagement_repository.create(
                user.id, content_id, content_type, kind, text=text, parent_id=parent_id
            )
        except Exception as e:
            self.logger.error(f"Error creating comment on {content_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        engagement_events_total.labels(kind=kind, action="created").inc()
        self._reward_owner(owner_id, user, kind, 1)
        return service_ok(comment)

    @BaseService.log_performance
    def delete_comment(self, comment_id, user: User, is_admin: bool = False, owner_id=None) -> ServiceResult[None]:
        """Delete a comment. Only the author or an admin may delete; replies are kept as top-level comments."""
        kind = Engagement.KIND_COMMENT
        comment = self.engagement_repository.get(comment_id, kind=kind)
        if comment is None:
            return service_err(ErrorCodes.NOT_FOUND, "Comment not found")

        if not is_admin and comment.user_id != user.id:
            engagement_rejections_total.labels(kind=kind, reason="forbidden").inc()
            return service_err(ErrorCodes.PERMISSION_DENIED, "You are not authorized to delete this comment")

        try:
            self.engagement_repository.delete(comment)
        except Exception as e:
            self.logger.error(f"Error deleting comment {comment_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        engagement_events_total.labels(kind=kind, action="deleted").inc()
        self._reward_owner(owner_id, user, kind, -1)
        return service_ok()

    @BaseService.log_performance
    def reshare(self, user: User, content_id: str, content_type: str, owner_id=None) -> ServiceResult[Engagement]:
        invalid = self._validate_content(content_id, content_type)
        if invalid:
            return invalid

        kind = Engagement.KIND_RESHARE
        try:
            reshare = self.engagement_repository.create(user.id, content_id, content_type, kind)
        except Exception as e:
            self.logger.error(f"Error creating reshare of {content_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        engagement_events_total.labels(kind=kind, action="created").inc()
        self._reward_owner(owner_id, user, kind, 1)
        return service_ok(reshare)

    # ===== Reads =====

    def counts(self, content_id: str) -> ServiceResult[Dict]:
        try:
            by_kind = self.engagement_repository.count_by_kind(content_id)
        except Exception as e:
            self.logger.error(f"Error counting engagement for {content_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        return service_ok(
            {
                "reactions": by_kind[Engagement.KIND_REACTION],
                "comments": by_kind[Engagement.KIND_COMMENT],
                "reshares": by_kind[Engagement.KIND_RESHARE],
                "total": sum(by_kind.values()),
            }
        )

    def has_user_reacted(self, user: User, content_id: str) -> bool:
        return (
            self.engagement_repository.find_user_engagement(user.id, content_id, Engagement.KIND_REACTION)
            is not None
        )

    def _page(self, queryset, page: int, page_size: int, label: str) -> ServiceResult[Dict]:
        try:
            return service_ok(paginate(queryset, page, page_size))
        except Exception as e:
            self.logger.error(f"Error listing {label}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def list_reactions(self, content_id: str, page: int = 1, page_size: int = 20) -> ServiceResult[Dict]:
        queryset = self.engagement_repository.for_content(content_id, Engagement.KIND_REACTION)
        return self._page(queryset, page, page_size, f"reactions of {content_id}")

    def list_comments(
        self, content_id: str, page: int = 1, page_size: int = 20, parent_id=None
    ) -> ServiceResult[Dict]:
        """Top-level comments by default, or the replies to ``parent_id``."""
        if parent_id is not None:
            return self.list_replies(parent_id, page, page_size)

        queryset = self.engagement_repository.top_level_comments(content_id)
        return self._page(queryset, page, page_size, f"comments of {content_id}")

    def list_replies(self, comment_id, page: int = 1, page_size: int = 20) -> ServiceResult[Dict]:
        if self.engagement_repository.get(comment_id, kind=Engagement.KIND_COMMENT) is None:
            return service_err(ErrorCodes.NOT_FOUND, "Comment not found")

        queryset = self.engagement_repository.replies(comment_id)
        return self._page(queryset, page, page_size, f"replies to {comment_id}")

    def list_reshares(self, content_id: str, page: int = 1, page_size: int = 20) -> ServiceResult[Dict]:
        queryset = self.engagement_repository.for_content(content_id, Engagement.KIND_RESHARE)
        return self._page(queryset, page, page_size, f"reshares of {content_id}")
