import uuid

from django.contrib.auth import get_user_model
from django.db import models

User = get_user_model()


class Engagement(models.Model):
    """
    One reaction, comment or reshare by a user on a piece of content.

    Content is referenced by an opaque id plus a free-form type tag
    (``Post``, ``Product``...), so engagement never depends on the
    content's own storage.
    """

    KIND_REACTION = "reaction"
    KIND_COMMENT = "comment"
    KIND_RESHARE = "reshare"

    KIND_CHOICES = [
        (KIND_REACTION, "Reaction"),
        (KIND_COMMENT, "Comment"),
        (KIND_RESHARE, "Reshare"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="engagements")
    content_id = models.CharField(max_length=64)
    content_type = models.CharField(max_length=50)
    kind = models.CharField(max_length=20, choices=KIND_CHOICES)

    # Comments only
    text = models.TextField(blank=True)
    parent = models.ForeignKey("self", on_delete=models.SET_NULL, null=True, blank=True, related_name="replies")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "engagement"
        ordering = ["-created_at"]
        constraints = [
            # At most one reaction per user per content
            models.UniqueConstraint(
                fields=["user", "content_id"],
                condition=models.Q(kind="reaction"),
                name="unique_user_reaction_per_content",
            ),
        ]
        indexes = [
            models.Index(fields=["content_id", "kind", "-created_at"], name="engagement_content_kind_idx"),
            models.Index(fields=["user", "content_id", "kind"], name="engagement_user_content_idx"),
        ]

    def __str__(self):
        return f"{self.kind} by {self.user_id} on {self.content_type}:{self.content_id}"
