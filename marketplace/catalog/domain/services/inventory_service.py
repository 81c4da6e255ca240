"""
InventoryService - Stock Management

Privileged stock changes made on behalf of the order lifecycle. Unlike
ProductService, these skip the seller-or-admin check and lock the product
row with SELECT FOR UPDATE so concurrent orders cannot oversell.
"""

import logging
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from marketplace.catalog.domain.models import Product
from marketplace.infra.observability.metrics import stock_adjustment_failures
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

logger = logging.getLogger(__name__)


class InventoryService(BaseService):
    """
    Service for locking products and adjusting their stock.
    """

    def lock_product(self, product_id) -> Optional[Product]:
        """
        Load a product with its row locked for the current transaction.

        Must be called inside ``transaction.atomic``. Unknown or malformed ids
        return None.
        """
        try:
            return Product.objects.select_for_update().filter(id=product_id).first()
        except ValidationError:
            return None

    @BaseService.log_performance
    def adjust_stock(self, product_id, delta: int, reason: str = "") -> ServiceResult[dict]:
        """
        Add ``delta`` (negative to decrement) to a product's stock.

        Args:
            product_id: UUID of the product
            delta: Signed quantity change, must be non-zero
            reason: Free-form label for audit logging

        Returns:
            ServiceResult with old_stock/new_stock, or INSUFFICIENT_STOCK when
            the change would take stock below zero

        Example:
            >>> result = inventory_service.adjust_stock(product.id, -2, reason="order_created")
            >>> result.value["new_stock"]
            3
        """
        if delta == 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Stock delta must be non-zero")

        return self._apply_delta(product_id, delta, reason)

    @transaction.atomic
    def _apply_delta(self, product_id, delta: int, reason: str) -> ServiceResult[dict]:
        try:
            product = self.lock_product(product_id)
            if product is None:
                stock_adjustment_failures.inc()
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            old_quantity = product.stock_quantity
            if old_quantity + delta < 0:
                stock_adjustment_failures.inc()
                return service_err(
                    ErrorCodes.INSUFFICIENT_STOCK,
                    f"Insufficient stock for product {product.name}. Available: {old_quantity}, Requested: {-delta}",
                )

            product.stock_quantity = old_quantity + delta
            product.save(update_fields=["stock_quantity", "updated_at"])

            self.logger.info(
                f"Stock adjusted: product={product.name}, delta={delta}, reason={reason}, "
                f"stock: {old_quantity} -> {product.stock_quantity}"
            )

            return service_ok(
                {
                    "product_id": str(product.id),
                    "old_stock": old_quantity,
                    "new_stock": product.stock_quantity,
                    "reason": reason,
                    "adjusted_at": timezone.now().isoformat(),
                }
            )

        except Exception as e:
            stock_adjustment_failures.inc()
            self.logger.error(f"Error adjusting stock for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
