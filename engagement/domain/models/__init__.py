from .engagement import Engagement

__all__ = ["Engagement"]
