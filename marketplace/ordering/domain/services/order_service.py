"""
OrderService - Order Lifecycle

Creates orders against a product's current price and stock, and moves them
through the status state machine on behalf of the buyer, the seller or an
admin.

Order creation and the stock decrement share one transaction with the
product row locked, as do cancellation and the stock restore, so a failure
never leaves stock and orders out of step.

Ranking consequences of a status change are not applied here; see
``marketplace.ordering.domain.services.ranking_hooks``.
"""

import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Dict, NamedTuple, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q, Sum

from infrastructure.observability.tracing import add_span_attributes, get_tracer
from marketplace.catalog.domain.services import InventoryService
from marketplace.infra.observability.metrics import (
    order_creation_duration,
    order_status_transitions_total,
    order_transition_rejections_total,
    order_value,
    orders_placed_total,
)
from marketplace.ordering.domain.models import Order
from marketplace.ordering.domain.state_machine import (
    InvalidTransitionError,
    is_valid_status,
    role_may_set,
    validate_transition,
)
from utils.pagination import paginate
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

User = get_user_model()
logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

UPDATABLE_FIELDS = ("shipping_address",)
MAX_SHIPPING_ADDRESS_LENGTH = 500


class StatusChange(NamedTuple):
    order: Order
    previous_status: str


class OrderService(BaseService):
    """
    Service for order creation and status management.

    Dependencies:
    - InventoryService: privileged stock adjustment
    """

    def __init__(self, inventory_service: InventoryService):
        super().__init__()
        self.inventory_service = inventory_service
        self.price_tolerance = Decimal(str(getattr(settings, "ORDER_PRICE_TOLERANCE", "0.01")))

    # ===== Helpers =====

    def _get_order(self, order_id, for_update: bool = False) -> Optional[Order]:
        queryset = Order.objects.select_related("product", "product__seller", "buyer")
        if for_update:
            queryset = queryset.select_for_update(of=("self",))
        try:
            return queryset.filter(id=order_id).first()
        except ValidationError:
            return None

    def _restore_stock(self, order: Order) -> ServiceResult:
        return self.inventory_service.adjust_stock(
            order.product_id, order.quantity, reason=f"order_{order.id}_canceled"
        )

    # ===== Creation =====

    @BaseService.log_performance
    def create_order(
        self, buyer: User, product_id, quantity: int, total_price, shipping_address: str = ""
    ) -> ServiceResult[Order]:
        """
        Place an order for ``quantity`` units of a product.

        Args:
            buyer: Purchasing user
            product_id: UUID of the product
            quantity: Units ordered (positive)
            total_price: Total the client expects to pay; must match
                price * quantity within ORDER_PRICE_TOLERANCE
            shipping_address: Optional delivery address

        Returns:
            ServiceResult with the pending Order, or one of PRODUCT_NOT_FOUND,
            PRODUCT_INACTIVE, INSUFFICIENT_STOCK, PRICE_MISMATCH

        Example:
            >>> result = order_service.create_order(buyer, product.id, 2, Decimal("20.00"))
            >>> result.value.status
            'pending'
        """
        start_time = time.time()

        with tracer.start_as_current_span("marketplace.create_order") as span:
            add_span_attributes(span, buyer_id=buyer.id, product_id=product_id, quantity=quantity)

            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                orders_placed_total.labels(status="invalid_quantity").inc()
                return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be a positive integer")

            try:
                client_total = Decimal(str(total_price))
            except (InvalidOperation, ValueError):
                orders_placed_total.labels(status="invalid_price").inc()
                return service_err(ErrorCodes.VALIDATION_ERROR, "total_price must be a decimal number")

            if not client_total.is_finite() or client_total < 0:
                orders_placed_total.labels(status="invalid_price").inc()
                return service_err(ErrorCodes.VALIDATION_ERROR, "total_price must be a finite, non-negative amount")

            if len(shipping_address or "") > MAX_SHIPPING_ADDRESS_LENGTH:
                return service_err(ErrorCodes.VALIDATION_ERROR, "shipping_address is too long")

            try:
                with transaction.atomic():
                    product = self.inventory_service.lock_product(product_id)

                    if product is None:
                        orders_placed_total.labels(status="product_not_found").inc()
                        return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

                    if not product.is_active:
                        orders_placed_total.labels(status="product_inactive").inc()
                        return service_err(ErrorCodes.PRODUCT_INACTIVE, "Product is not available for purchase")

                    if product.stock_quantity < quantity:
                        orders_placed_total.labels(status="insufficient_stock").inc()
                        return service_err(
                            ErrorCodes.INSUFFICIENT_STOCK,
                            f"Not enough stock available. Available: {product.stock_quantity}, Requested: {quantity}",
                        )

                    server_total = product.price * quantity
                    if abs(server_total - client_total) > self.price_tolerance:
                        orders_placed_total.labels(status="price_mismatch").inc()
                        return service_err(
                            ErrorCodes.PRICE_MISMATCH,
                            "Price mismatch - order price does not match current product price",
                        )

                    order = Order.objects.create(
                        buyer=buyer,
                        product=product,
                        quantity=quantity,
                        total_price=client_total,
                        status=Order.STATUS_PENDING,
                        shipping_address=shipping_address or "",
                    )

                    stock_result = self.inventory_service.adjust_stock(
                        product.id, -quantity, reason=f"order_{order.id}_created"
                    )
                    if not stock_result.ok:
                        transaction.set_rollback(True)
                        orders_placed_total.labels(status=stock_result.error).inc()
                        return stock_result

            except Exception as e:
                orders_placed_total.labels(status="error").inc()
                self.logger.error(f"Error creating order for product {product_id}: {e}", exc_info=True)
                return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

            orders_placed_total.labels(status="success").inc()
            order_value.observe(float(order.total_price))
            order_creation_duration.observe(time.time() - start_time)
            add_span_attributes(span, order_id=order.id)

            self.logger.info(
                f"Order {order.id} created: buyer={buyer.id}, product={product.id}, "
                f"quantity={quantity}, total={order.total_price}"
            )
            return service_ok(order)

    # ===== Status =====

    @BaseService.log_performance
    def update_status(
        self, order_id, new_status: str, user: User, is_admin: bool = False
    ) -> ServiceResult[StatusChange]:
        """
        Move an order to ``new_status``.

        Checks, in order: the order exists, the caller is its buyer, its
        seller or an admin, the state machine allows the move, and a non-admin
        caller's role allows the target. Moving into ``canceled`` returns the
        ordered quantity to stock.

        Returns:
            ServiceResult with StatusChange(order, previous_status)
        """
        if not is_valid_status(new_status):
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Invalid status value '{new_status}'")

        try:
            with transaction.atomic():
                order = self._get_order(order_id, for_update=True)
                if order is None:
                    return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

                is_seller = order.product.seller_id == user.id
                is_buyer = order.buyer_id == user.id

                if not is_admin and not is_seller and not is_buyer:
                    order_transition_rejections_total.labels(reason="not_party").inc()
                    return service_err(ErrorCodes.PERMISSION_DENIED, "You are not authorized to update this order")

                try:
                    validate_transition(order.status, new_status)
                except InvalidTransitionError as e:
                    order_transition_rejections_total.labels(reason="invalid_transition").inc()
                    return service_err(ErrorCodes.INVALID_TRANSITION, str(e))

                if not is_admin and not role_may_set(new_status, is_seller, is_buyer):
                    order_transition_rejections_total.labels(reason="role").inc()
                    if is_seller:
                        detail = "Sellers can only set orders to processing, shipped, or completed"
                    else:
                        detail = "Buyers can only cancel orders"
                    return service_err(ErrorCodes.PERMISSION_DENIED, detail)

                previous_status = order.status
                order.status = new_status
                order.save(update_fields=["status", "updated_at"])

                if new_status == Order.STATUS_CANCELED:
                    stock_result = self._restore_stock(order)
                    if not stock_result.ok:
                        transaction.set_rollback(True)
                        return stock_result

        except Exception as e:
            self.logger.error(f"Error updating status of order {order_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        order_status_transitions_total.labels(from_status=previous_status, to_status=new_status).inc()
        self.logger.info(f"Order {order.id} status: {previous_status} -> {new_status} by user {user.id}")
        return service_ok(StatusChange(order=order, previous_status=previous_status))

    @BaseService.log_performance
    def cancel_order(self, order_id, user: User, is_admin: bool = False) -> ServiceResult[Order]:
        """
        Cancel a pending order and return its quantity to stock.

        Unlike ``update_status``, the seller may cancel too, but only while the
        order is still ``pending``.
        """
        try:
            with transaction.atomic():
                order = self._get_order(order_id, for_update=True)
                if order is None:
                    return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

                if not is_admin and order.buyer_id != user.id and order.product.seller_id != user.id:
                    return service_err(ErrorCodes.PERMISSION_DENIED, "You are not authorized to cancel this order")

                if order.status != Order.STATUS_PENDING:
                    return service_err(ErrorCodes.INVALID_ORDER_STATE, "Only pending orders can be canceled")

                order.status = Order.STATUS_CANCELED
                order.save(update_fields=["status", "updated_at"])

                stock_result = self._restore_stock(order)
                if not stock_result.ok:
                    transaction.set_rollback(True)
                    return stock_result

        except Exception as e:
            self.logger.error(f"Error canceling order {order_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        order_status_transitions_total.labels(from_status=Order.STATUS_PENDING, to_status=Order.STATUS_CANCELED).inc()
        self.logger.info(f"Order {order.id} canceled by user {user.id}")
        return service_ok(order)

    # ===== Details =====

    @BaseService.log_performance
    def update_order(self, order_id, patch: Dict, user: User, is_admin: bool = False) -> ServiceResult[Order]:
        """
        Update non-status fields of an order (buyer or admin only).

        Completed orders can only be edited by an admin. Keys outside
        UPDATABLE_FIELDS are ignored.
        """
        changes = {field: patch[field] for field in UPDATABLE_FIELDS if field in patch}

        address = changes.get("shipping_address")
        if address is not None and len(address) > MAX_SHIPPING_ADDRESS_LENGTH:
            return service_err(ErrorCodes.VALIDATION_ERROR, "shipping_address is too long")

        try:
            with transaction.atomic():
                order = self._get_order(order_id, for_update=True)
                if order is None:
                    return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

                if not is_admin and order.buyer_id != user.id:
                    return service_err(ErrorCodes.PERMISSION_DENIED, "You are not authorized to update this order")

                if order.status == Order.STATUS_COMPLETED and not is_admin:
                    return service_err(ErrorCodes.INVALID_ORDER_STATE, "Cannot update a completed order")

                if changes:
                    for field, value in changes.items():
                        setattr(order, field, value or "")
                    order.save(update_fields=[*changes.keys(), "updated_at"])

        except Exception as e:
            self.logger.error(f"Error updating order {order_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(f"Order {order.id} details updated by user {user.id}: {sorted(changes)}")
        return service_ok(order)

    # ===== Reads =====

    def get_order(self, order_id, user: User, is_admin: bool = False) -> ServiceResult[Order]:
        """Fetch an order visible to its buyer, its seller or an admin."""
        order = self._get_order(order_id)
        if order is None:
            return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

        if not is_admin and order.buyer_id != user.id and order.product.seller_id != user.id:
            return service_err(ErrorCodes.PERMISSION_DENIED, "You are not authorized to view this order")

        return service_ok(order)

    @BaseService.log_performance
    def list_orders(
        self, buyer_id=None, seller_id=None, status: Optional[str] = None, page: int = 1, page_size: int = 10
    ) -> ServiceResult[Dict]:
        """
        List orders newest first, optionally filtered by buyer, seller and status.

        Example:
            >>> result = order_service.list_orders(seller_id=seller.id, status="pending")
            >>> result.value["count"]
        """
        if status and not is_valid_status(status):
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Invalid status value '{status}'")

        try:
            queryset = Order.objects.select_related("product", "product__seller", "buyer")

            if buyer_id:
                queryset = queryset.filter(buyer_id=buyer_id)
            if seller_id:
                queryset = queryset.filter(product__seller_id=seller_id)
            if status:
                queryset = queryset.filter(status=status)

            result_data = paginate(queryset.order_by("-created_at"), page, page_size)

            self.logger.info(f"Listed orders: {result_data['count']} total, page {result_data['page']}")
            return service_ok(result_data)

        except Exception as e:
            self.logger.error(f"Error listing orders: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def _stats(self, queryset) -> Dict:
        return queryset.aggregate(
            total_orders=Count("id"),
            total_value=Sum("total_price"),
            pending_orders=Count("id", filter=Q(status=Order.STATUS_PENDING)),
            completed_orders=Count("id", filter=Q(status=Order.STATUS_COMPLETED)),
        )

    def get_seller_stats(self, seller_id) -> ServiceResult[Dict]:
        """Order totals for a seller; revenue sums every order on their products."""
        try:
            stats = self._stats(Order.objects.filter(product__seller_id=seller_id))
        except Exception as e:
            self.logger.error(f"Error getting seller stats for {seller_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        return service_ok(
            {
                "total_orders": stats["total_orders"],
                "total_revenue": stats["total_value"] or Decimal("0.00"),
                "pending_orders": stats["pending_orders"],
                "completed_orders": stats["completed_orders"],
            }
        )

    def get_buyer_stats(self, buyer_id) -> ServiceResult[Dict]:
        try:
            stats = self._stats(Order.objects.filter(buyer_id=buyer_id))
        except Exception as e:
            self.logger.error(f"Error getting buyer stats for {buyer_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        return service_ok(
            {
                "total_orders": stats["total_orders"],
                "total_spent": stats["total_value"] or Decimal("0.00"),
                "pending_orders": stats["pending_orders"],
                "completed_orders": stats["completed_orders"],
            }
        )
