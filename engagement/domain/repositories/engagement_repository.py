"""
EngagementRepository - Engagement Record persistence

Queries and writes over Engagement. Listing methods return querysets ordered
newest first so that callers can paginate them.
"""

from typing import Dict, Optional

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count

from engagement.domain.exceptions import DuplicateReactionError
from engagement.domain.models import Engagement


class EngagementRepository:
    def __init__(self, model=Engagement):
        self.model = model

    def get(self, engagement_id, kind: Optional[str] = None) -> Optional[Engagement]:
        queryset = self.model.objects.filter(kind=kind) if kind else self.model.objects.all()
        try:
            return queryset.filter(id=engagement_id).first()
        except ValidationError:
            # Not a UUID
            return None

    def find_user_engagement(self, user_id, content_id: str, kind: str) -> Optional[Engagement]:
        return self.model.objects.filter(user_id=user_id, content_id=content_id, kind=kind).first()

    def create(
        self, user_id, content_id: str, content_type: str, kind: str, text: str = "", parent_id=None
    ) -> Engagement:
        try:
            with transaction.atomic():
                return self.model.objects.create(
                    user_id=user_id,
                    content_id=content_id,
                    content_type=content_type,
                    kind=kind,
                    text=text,
                    parent_id=parent_id,
                )
        except IntegrityError as e:
            if kind == self.model.KIND_REACTION:
                raise DuplicateReactionError(f"User {user_id} already reacted to {content_id}") from e
            raise

    def delete(self, engagement: Engagement) -> None:
        engagement.delete()

    def count_by_kind(self, content_id: str) -> Dict[str, int]:
        """One grouped count over the content's records, keyed by kind."""
        rows = self.model.objects.filter(content_id=content_id).values("kind").annotate(total=Count("id"))
        counts = {kind: 0 for kind, _ in self.model.KIND_CHOICES}
        for row in rows:
            counts[row["kind"]] = row["total"]
        return counts

    def for_content(self, content_id: str, kind: str):
        return (
            self.model.objects.filter(content_id=content_id, kind=kind)
            .select_related("user")
            .order_by("-created_at")
        )

    def top_level_comments(self, content_id: str):
        return self.for_content(content_id, self.model.KIND_COMMENT).filter(parent__isnull=True)

    def replies(self, comment_id):
        return (
            self.model.objects.filter(parent_id=comment_id, kind=self.model.KIND_COMMENT)
            .select_related("user")
            .order_by("-created_at")
        )
