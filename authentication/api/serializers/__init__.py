from .user_serializers import MinimalUserSerializer


__all__ = ["MinimalUserSerializer"]
