from engagement.domain.models import Engagement


__all__ = ["Engagement"]
