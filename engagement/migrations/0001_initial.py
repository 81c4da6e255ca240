import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Engagement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("content_id", models.CharField(max_length=64)),
                ("content_type", models.CharField(max_length=50)),
                (
                    "kind",
                    models.CharField(
                        choices=[("reaction", "Reaction"), ("comment", "Comment"), ("reshare", "Reshare")],
                        max_length=20,
                    ),
                ),
                ("text", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="replies",
                        to="engagement.engagement",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="engagements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["content_id", "kind", "-created_at"], name="engagement_content_kind_idx"),
                    models.Index(fields=["user", "content_id", "kind"], name="engagement_user_content_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("kind", "reaction")),
                        fields=("user", "content_id"),
                        name="unique_user_reaction_per_content",
                    )
                ],
            },
        ),
    ]
