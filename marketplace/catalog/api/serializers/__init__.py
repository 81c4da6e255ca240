from .product_serializers import (
    CategoryListSerializer,
    CreateProductRequestSerializer,
    ProductFilterSerializer,
    ProductListResponseSerializer,
    ProductSerializer,
    UpdateProductRequestSerializer,
)


__all__ = [
    "CategoryListSerializer",
    "CreateProductRequestSerializer",
    "ProductFilterSerializer",
    "ProductListResponseSerializer",
    "ProductSerializer",
    "UpdateProductRequestSerializer",
]
