from .engagement_serializers import (
    CommentRequestSerializer,
    EngagementCountsSerializer,
    EngagementPageSerializer,
    EngagementSerializer,
    HasReactedSerializer,
    OwnerRequestSerializer,
)


__all__ = [
    "CommentRequestSerializer",
    "EngagementCountsSerializer",
    "EngagementPageSerializer",
    "EngagementSerializer",
    "HasReactedSerializer",
    "OwnerRequestSerializer",
]
