from .order_serializers import (
    BuyerStatsSerializer,
    CreateOrderRequestSerializer,
    OrderListResponseSerializer,
    OrderSerializer,
    SellerStatsSerializer,
    UpdateOrderRequestSerializer,
    UpdateOrderStatusRequestSerializer,
)


__all__ = [
    "BuyerStatsSerializer",
    "CreateOrderRequestSerializer",
    "OrderListResponseSerializer",
    "OrderSerializer",
    "SellerStatsSerializer",
    "UpdateOrderRequestSerializer",
    "UpdateOrderStatusRequestSerializer",
]
