from rest_framework import serializers

from authentication.api.serializers import MinimalUserSerializer
from marketplace.catalog.domain.models import Product


class ProductSerializer(serializers.ModelSerializer):
    seller = MinimalUserSerializer(read_only=True)
    is_in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "category",
            "price",
            "stock_quantity",
            "is_in_stock",
            "is_active",
            "seller",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CreateProductRequestSerializer(serializers.Serializer):
    """Request body for listing a product"""

    name = serializers.CharField(max_length=200, help_text="Product name")
    description = serializers.CharField(max_length=5000, help_text="Product description")
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, help_text="Unit price")
    stock_quantity = serializers.IntegerField(min_value=0, default=1, help_text="Units available")
    category = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    is_active = serializers.BooleanField(default=True)


class UpdateProductRequestSerializer(serializers.Serializer):
    """Partial product update; only the given fields change."""

    name = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(max_length=5000, required=False)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    stock_quantity = serializers.IntegerField(min_value=0, required=False)
    category = serializers.CharField(max_length=50, required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


class ProductFilterSerializer(serializers.Serializer):
    """Query parameters for product listing and search"""

    q = serializers.CharField(required=False, max_length=200)
    seller_id = serializers.UUIDField(required=False)
    category = serializers.CharField(required=False, max_length=50)
    min_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    max_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    in_stock = serializers.BooleanField(required=False, default=False)
    is_active = serializers.ChoiceField(
        choices=["true", "false"], required=False, help_text="Inactive listings: own products or admin only"
    )


class ProductListResponseSerializer(serializers.Serializer):
    """Paginated product list response"""

    count = serializers.IntegerField(help_text="Total number of products")
    page = serializers.IntegerField(help_text="Current page number")
    page_size = serializers.IntegerField(help_text="Items per page")
    num_pages = serializers.IntegerField(help_text="Total number of pages")
    results = ProductSerializer(many=True)


class CategoryListSerializer(serializers.Serializer):
    categories = serializers.ListField(child=serializers.CharField())
