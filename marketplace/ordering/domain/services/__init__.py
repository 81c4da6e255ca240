from .order_service import OrderService, StatusChange
from .ranking_hooks import apply_order_outcome_ranking

__all__ = ["OrderService", "StatusChange", "apply_order_outcome_ranking"]
