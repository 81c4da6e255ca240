from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.catalog.api.serializers import (
    CategoryListSerializer,
    CreateProductRequestSerializer,
    ProductFilterSerializer,
    ProductListResponseSerializer,
    ProductSerializer,
    UpdateProductRequestSerializer,
)
from marketplace.catalog.domain.services import ProductService
from utils.api_errors import ErrorResponseSerializer, error_response
from utils.pagination import pagination_params
from utils.rbac import is_admin

FILTER_PARAMETERS = [
    OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
    OpenApiParameter(name="page_size", type=int, description="Items per page (default: 20)"),
    OpenApiParameter(name="seller_id", type=str, description="Filter by seller"),
    OpenApiParameter(name="category", type=str, description="Filter by category (case-insensitive)"),
    OpenApiParameter(name="min_price", type=str, description="Minimum price"),
    OpenApiParameter(name="max_price", type=str, description="Maximum price"),
    OpenApiParameter(name="in_stock", type=bool, description="Only products with stock"),
    OpenApiParameter(name="is_active", type=str, description="'false' lists inactive products (own or admin)"),
]

READ_ACTIONS = ("list", "retrieve", "search", "categories")


def _validation_error(detail):
    return Response({"error": "validation_error", "detail": detail}, status=status.HTTP_400_BAD_REQUEST)


class ProductViewSet(viewsets.ViewSet):
    """Marketplace listings. Browsing is public; writes need the seller or an admin."""

    def get_permissions(self):
        if self.action in READ_ACTIONS:
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_service(self) -> ProductService:
        return container.product_service()

    def _filters(self, request):
        """Returns (filters, query, error_response)."""
        serializer = ProductFilterSerializer(data=request.query_params)
        if not serializer.is_valid():
            return None, "", _validation_error(serializer.errors)

        data = serializer.validated_data
        filters = {key: data[key] for key in ("seller_id", "category", "min_price", "max_price") if key in data}
        filters["in_stock"] = data.get("in_stock", False)

        if data.get("is_active") == "false":
            own_listing = request.user.is_authenticated and data.get("seller_id") == request.user.id
            if not (own_listing or is_admin(request.user)):
                return None, "", Response(
                    {"error": "permission_denied", "detail": "Inactive products are visible to their seller only"},
                    status=status.HTTP_403_FORBIDDEN,
                )
            filters["is_active"] = False

        return filters, data.get("q", ""), None

    def _page_response(self, request, search: bool):
        try:
            page, page_size = pagination_params(request)
        except ValueError:
            return _validation_error("page and page_size must be integers")

        filters, query, error = self._filters(request)
        if error is not None:
            return error

        if search:
            result = self.get_service().search_products(query, filters, page=page, page_size=page_size)
        else:
            result = self.get_service().list_products(filters, page=page, page_size=page_size)
        if not result.ok:
            return error_response(result)

        response_data = result.value
        response_data["results"] = ProductSerializer(result.value["results"], many=True).data
        return Response(response_data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="products_list",
        summary="Browse products",
        description="""
        Active products, newest first. Filters combine with AND.
        """,
        parameters=FILTER_PARAMETERS,
        responses={200: ProductListResponseSerializer},
        tags=["Marketplace - Products"],
    )
    def list(self, request):
        return self._page_response(request, search=False)

    @extend_schema(
        operation_id="products_search",
        summary="Search products by keyword",
        parameters=[OpenApiParameter(name="q", type=str, required=True, description="Keyword")] + FILTER_PARAMETERS,
        responses={
            200: ProductListResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Missing keyword"),
        },
        tags=["Marketplace - Products"],
    )
    @action(detail=False, methods=["get"])
    def search(self, request):
        return self._page_response(request, search=True)

    @extend_schema(
        operation_id="products_categories",
        summary="Categories in use by active products",
        responses={200: CategoryListSerializer},
        tags=["Marketplace - Products"],
    )
    @action(detail=False, methods=["get"])
    def categories(self, request):
        result = self.get_service().get_categories()
        if not result.ok:
            return error_response(result)
        return Response({"categories": result.value}, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product details",
        responses={
            200: ProductSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Not found or inactive"),
        },
        tags=["Marketplace - Products"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_product(pk, request.user, is_admin=is_admin(request.user))
        if not result.ok:
            return error_response(result)
        return Response(ProductSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="products_create",
        summary="List a product for sale",
        description="""
        **What it receives:**
        - `name`, `description`, `price`
        - Optional `stock_quantity` (default 1), `category`, `is_active`

        **What it returns:**
        - The created product; the authenticated user is its seller
        """,
        request=CreateProductRequestSerializer,
        responses={
            201: ProductSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid product data"),
        },
        tags=["Marketplace - Products"],
    )
    def create(self, request):
        serializer = CreateProductRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _validation_error(serializer.errors)

        result = self.get_service().create_product(request.user, serializer.validated_data)
        if not result.ok:
            return error_response(result)
        return Response(ProductSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="products_update",
        summary="Update a product (seller or admin)",
        request=UpdateProductRequestSerializer,
        responses={
            200: ProductSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid product data"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the seller or admin"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Products"],
    )
    def update(self, request, pk=None):
        serializer = UpdateProductRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _validation_error(serializer.errors)

        result = self.get_service().update_product(
            pk, request.user, serializer.validated_data, is_admin=is_admin(request.user)
        )
        if not result.ok:
            return error_response(result)
        return Response(ProductSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="products_partial_update",
        summary="Update a product (seller or admin)",
        request=UpdateProductRequestSerializer,
        responses={
            200: ProductSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid product data"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the seller or admin"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Products"],
    )
    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    @extend_schema(
        operation_id="products_destroy",
        summary="Delete a product (seller or admin)",
        responses={
            204: None,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the seller or admin"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Product has orders"),
        },
        tags=["Marketplace - Products"],
    )
    def destroy(self, request, pk=None):
        result = self.get_service().delete_product(pk, request.user, is_admin=is_admin(request.user))
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)
