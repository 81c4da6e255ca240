from rest_framework import serializers

from authentication.api.serializers import MinimalUserSerializer
from marketplace.catalog.domain.models import Product
from marketplace.ordering.domain.models import Order


class OrderProductSerializer(serializers.ModelSerializer):
    seller = MinimalUserSerializer(read_only=True)

    class Meta:
        model = Product
        fields = ["id", "name", "price", "seller"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    buyer = MinimalUserSerializer(read_only=True)
    product = OrderProductSerializer(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "buyer",
            "product",
            "quantity",
            "total_price",
            "status",
            "shipping_address",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CreateOrderRequestSerializer(serializers.Serializer):
    """Request body for placing an order"""

    product_id = serializers.UUIDField(help_text="Product to order")
    quantity = serializers.IntegerField(min_value=1, help_text="Units to order")
    total_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, help_text="Expected total (price * quantity)"
    )
    shipping_address = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default="", help_text="Delivery address"
    )


class UpdateOrderStatusRequestSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES, help_text="Target status")


class UpdateOrderRequestSerializer(serializers.Serializer):
    """Either order details or a status change; ``status`` wins when given."""

    shipping_address = serializers.CharField(max_length=500, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES, required=False)


class OrderListResponseSerializer(serializers.Serializer):
    """Paginated order list response"""

    count = serializers.IntegerField(help_text="Total number of orders")
    page = serializers.IntegerField(help_text="Current page number")
    page_size = serializers.IntegerField(help_text="Items per page")
    num_pages = serializers.IntegerField(help_text="Total number of pages")
    results = OrderSerializer(many=True)


class SellerStatsSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    pending_orders = serializers.IntegerField()
    completed_orders = serializers.IntegerField()


class BuyerStatsSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    total_spent = serializers.DecimalField(max_digits=12, decimal_places=2)
    pending_orders = serializers.IntegerField()
    completed_orders = serializers.IntegerField()
