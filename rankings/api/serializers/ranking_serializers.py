from rest_framework import serializers

from authentication.api.serializers import MinimalUserSerializer
from rankings.domain.models import UserRanking


class UserRankingSerializer(serializers.ModelSerializer):
    user = MinimalUserSerializer(read_only=True)

    class Meta:
        model = UserRanking
        fields = ["id", "user", "category", "score", "updated_by", "created_at", "updated_at"]
        read_only_fields = fields


class RankingEntrySerializer(serializers.ModelSerializer):
    """Ranking row nested under a user, without repeating the user."""

    class Meta:
        model = UserRanking
        fields = ["category", "score", "updated_at"]
        read_only_fields = fields


class RankingSummarySerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    total_score = serializers.FloatField()
    ranking_count = serializers.IntegerField()
    average_score = serializers.FloatField()
    rankings = RankingEntrySerializer(many=True)


class LeaderboardEntrySerializer(serializers.Serializer):
    user = MinimalUserSerializer()
    total_score = serializers.FloatField()
    rankings = RankingEntrySerializer(many=True)


class RankingCategorySerializer(serializers.Serializer):
    name = serializers.CharField()
    label = serializers.CharField()
    description = serializers.CharField()


class UpdateRankingRequestSerializer(serializers.Serializer):
    """Exactly one of ``score`` (absolute) or ``adjustment`` (delta)."""

    score = serializers.FloatField(required=False)
    adjustment = serializers.FloatField(required=False)

    def validate(self, attrs):
        if ("score" in attrs) == ("adjustment" in attrs):
            raise serializers.ValidationError("Provide exactly one of 'score' or 'adjustment'")
        return attrs
