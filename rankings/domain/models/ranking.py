from django.contrib.auth import get_user_model
from django.db import models

User = get_user_model()


class UserRanking(models.Model):
    """
    A user's score in one ranking category.

    Rows are created lazily the first time a score is adjusted and are never
    deleted by the engagement or order flows.
    """

    CATEGORY_CONTENT = "content"
    CATEGORY_SALES = "sales"
    CATEGORY_REPUTATION = "reputation"

    CATEGORY_CHOICES = [
        (CATEGORY_CONTENT, "Content"),
        (CATEGORY_SALES, "Sales"),
        (CATEGORY_REPUTATION, "Reputation"),
    ]

    CATEGORY_DESCRIPTIONS = {
        CATEGORY_CONTENT: "Engagement received on published content",
        CATEGORY_SALES: "Volume of completed marketplace sales",
        CATEGORY_REPUTATION: "Reliability as a marketplace seller",
    }

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="rankings")
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    score = models.FloatField(default=0)

    # Actor of the last write (the ranked user when nobody else is known)
    updated_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="ranking_updates"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "rankings"
        ordering = ["-score"]
        constraints = [
            models.UniqueConstraint(fields=["user", "category"], name="unique_user_ranking_category"),
        ]
        indexes = [
            models.Index(fields=["category", "-score"], name="rankings_category_score_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} - {self.category}: {self.score}"

    @classmethod
    def is_valid_category(cls, category) -> bool:
        return category in cls.CATEGORY_DESCRIPTIONS
