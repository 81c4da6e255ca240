from rest_framework import serializers

from authentication.api.serializers import MinimalUserSerializer
from engagement.domain.models import Engagement


class EngagementSerializer(serializers.ModelSerializer):
    user = MinimalUserSerializer(read_only=True)
    reply_count = serializers.SerializerMethodField()

    class Meta:
        model = Engagement
        fields = ["id", "user", "content_id", "content_type", "kind", "text", "parent", "reply_count", "created_at"]
        read_only_fields = fields

    def get_reply_count(self, obj):
        if obj.kind != Engagement.KIND_COMMENT:
            return 0
        return obj.replies.count()


class EngagementPageSerializer(serializers.Serializer):
    """Paginated engagement list response"""

    count = serializers.IntegerField(help_text="Total number of records")
    page = serializers.IntegerField(help_text="Current page number")
    page_size = serializers.IntegerField(help_text="Items per page")
    num_pages = serializers.IntegerField(help_text="Total number of pages")
    results = EngagementSerializer(many=True)


class EngagementCountsSerializer(serializers.Serializer):
    reactions = serializers.IntegerField()
    comments = serializers.IntegerField()
    reshares = serializers.IntegerField()
    total = serializers.IntegerField()


class OwnerRequestSerializer(serializers.Serializer):
    owner_id = serializers.UUIDField(required=False, allow_null=True, help_text="Content owner to reward")


class CommentRequestSerializer(OwnerRequestSerializer):
    text = serializers.CharField(max_length=1000, trim_whitespace=True, help_text="Comment body (1-1000 chars)")
    parent_id = serializers.UUIDField(required=False, allow_null=True, help_text="Comment being replied to")


class HasReactedSerializer(serializers.Serializer):
    has_reacted = serializers.BooleanField()
