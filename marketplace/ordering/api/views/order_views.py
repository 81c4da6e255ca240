from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.ordering.api.serializers import (
    BuyerStatsSerializer,
    CreateOrderRequestSerializer,
    OrderListResponseSerializer,
    OrderSerializer,
    SellerStatsSerializer,
    UpdateOrderRequestSerializer,
    UpdateOrderStatusRequestSerializer,
)
from marketplace.ordering.domain.services import OrderService, apply_order_outcome_ranking
from utils.api_errors import ErrorResponseSerializer, error_response
from utils.pagination import pagination_params
from utils.rbac import is_admin

PAGINATION_PARAMETERS = [
    OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
    OpenApiParameter(name="page_size", type=int, description="Items per page (default: 10)"),
]
STATUS_PARAMETER = OpenApiParameter(name="status", type=str, description="Filter by order status")
USER_PARAMETER = OpenApiParameter(name="user_id", type=str, description="Another user's stats (admin only)")


def _error(code, detail, http_status):
    return Response({"error": code, "detail": detail}, status=http_status)


class OrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> OrderService:
        return container.order_service()

    def _list_response(self, request, **filters):
        try:
            page, page_size = pagination_params(request, default_page_size=10)
        except ValueError:
            return _error("validation_error", "page and page_size must be integers", status.HTTP_400_BAD_REQUEST)

        result = self.get_service().list_orders(
            status=request.query_params.get("status"), page=page, page_size=page_size, **filters
        )
        if not result.ok:
            return error_response(result)

        response_data = result.value
        response_data["results"] = OrderSerializer(result.value["results"], many=True).data
        return Response(response_data, status=status.HTTP_200_OK)

    def _stats_user_id(self, request):
        """Own id, or the ``user_id`` query param for admins. None means forbidden."""
        user_id = request.query_params.get("user_id")
        if not user_id or str(user_id) == str(request.user.id):
            return request.user.id
        if is_admin(request.user):
            return user_id
        return None

    def _change_status(self, request, pk, new_status):
        result = self.get_service().update_status(pk, new_status, request.user, is_admin=is_admin(request.user))
        if not result.ok:
            return error_response(result)

        change = result.value
        apply_order_outcome_ranking(change.order, change.previous_status, container.ranking_service())
        return Response(OrderSerializer(change.order).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_create",
        summary="Place an order",
        description="""
        **What it receives:**
        - `product_id`, `quantity`
        - `total_price`: must equal product price * quantity (within 0.01)
        - Optional `shipping_address`

        **What it returns:**
        - The created order at status `pending`; product stock is decremented
        """,
        request=CreateOrderRequestSerializer,
        responses={
            201: OrderSerializer,
            400: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Inactive product, insufficient stock or price mismatch",
            ),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def create(self, request):
        serializer = CreateOrderRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _error("validation_error", serializer.errors, status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = self.get_service().create_order(
            request.user,
            data["product_id"],
            data["quantity"],
            data["total_price"],
            shipping_address=data.get("shipping_address", ""),
        )
        if not result.ok:
            return error_response(result)

        return Response(OrderSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="orders_retrieve",
        summary="Get order details",
        responses={
            200: OrderSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not buyer, seller or admin"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_order(pk, request.user, is_admin=is_admin(request.user))
        if not result.ok:
            return error_response(result)

        return Response(OrderSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_list",
        summary="List all orders (admin)",
        parameters=PAGINATION_PARAMETERS
        + [
            STATUS_PARAMETER,
            OpenApiParameter(name="buyer_id", type=str, description="Filter by buyer"),
            OpenApiParameter(name="seller_id", type=str, description="Filter by seller"),
        ],
        responses={
            200: OrderListResponseSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin role required"),
        },
        tags=["Marketplace - Orders"],
    )
    def list(self, request):
        if not is_admin(request.user):
            return _error("permission_denied", "Admin role required", status.HTTP_403_FORBIDDEN)

        return self._list_response(
            request,
            buyer_id=request.query_params.get("buyer_id"),
            seller_id=request.query_params.get("seller_id"),
        )

    @extend_schema(
        operation_id="orders_my_purchases",
        summary="List orders where the user is the buyer",
        parameters=PAGINATION_PARAMETERS + [STATUS_PARAMETER],
        responses={200: OrderListResponseSerializer},
        tags=["Marketplace - Orders"],
    )
    @action(detail=False, methods=["get"])
    def my_purchases(self, request):
        return self._list_response(request, buyer_id=request.user.id)

    @extend_schema(
        operation_id="orders_my_sales",
        summary="List orders for products the user sells",
        parameters=PAGINATION_PARAMETERS + [STATUS_PARAMETER],
        responses={200: OrderListResponseSerializer},
        tags=["Marketplace - Orders"],
    )
    @action(detail=False, methods=["get"])
    def my_sales(self, request):
        return self._list_response(request, seller_id=request.user.id)

    @extend_schema(
        operation_id="orders_buyer_stats",
        summary="Purchase statistics",
        parameters=[USER_PARAMETER],
        responses={
            200: BuyerStatsSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin role required"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=False, methods=["get"])
    def buyer_stats(self, request):
        user_id = self._stats_user_id(request)
        if user_id is None:
            return _error("permission_denied", "Admin role required", status.HTTP_403_FORBIDDEN)

        result = self.get_service().get_buyer_stats(user_id)
        if not result.ok:
            return error_response(result)
        return Response(BuyerStatsSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_seller_stats",
        summary="Sales statistics",
        parameters=[USER_PARAMETER],
        responses={
            200: SellerStatsSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin role required"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=False, methods=["get"])
    def seller_stats(self, request):
        user_id = self._stats_user_id(request)
        if user_id is None:
            return _error("permission_denied", "Admin role required", status.HTTP_403_FORBIDDEN)

        result = self.get_service().get_seller_stats(user_id)
        if not result.ok:
            return error_response(result)
        return Response(SellerStatsSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_update_status",
        summary="Change order status",
        description="""
        **Transitions:**
        - pending -> processing, completed, canceled
        - processing -> completed, shipped, canceled
        - shipped -> completed

        **Roles (non-admin):**
        - Seller may set processing, shipped, completed
        - Buyer may set canceled

        Completing an order credits the seller's sales and reputation rankings.
        """,
        request=UpdateOrderStatusRequestSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid status or transition"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Role may not set this status"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):
        serializer = UpdateOrderStatusRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _error("validation_error", serializer.errors, status.HTTP_400_BAD_REQUEST)

        return self._change_status(request, pk, serializer.validated_data["status"])

    @extend_schema(
        operation_id="orders_update",
        summary="Update order details or status",
        request=UpdateOrderRequestSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data or state"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the buyer or admin"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def update(self, request, pk=None):
        serializer = UpdateOrderRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _error("validation_error", serializer.errors, status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        if "status" in data:
            return self._change_status(request, pk, data["status"])

        result = self.get_service().update_order(pk, data, request.user, is_admin=is_admin(request.user))
        if not result.ok:
            return error_response(result)
        return Response(OrderSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_cancel",
        summary="Cancel a pending order",
        request=None,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Order is not pending"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not buyer, seller or admin"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        result = self.get_service().cancel_order(pk, request.user, is_admin=is_admin(request.user))
        if not result.ok:
            return error_response(result)
        return Response(OrderSerializer(result.value).data, status=status.HTTP_200_OK)
