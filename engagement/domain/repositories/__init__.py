from .engagement_repository import EngagementRepository

__all__ = ["EngagementRepository"]
