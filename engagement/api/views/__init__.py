from .engagement_views import EngagementViewSet

__all__ = ["EngagementViewSet"]
