from .engagement_service import EngagementService

__all__ = ["EngagementService"]
