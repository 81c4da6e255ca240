"""
ProductService - Product CRUD & Search

Listing management for sellers: create, edit and remove products, plus
public browsing, keyword search and the category list.

Only the product's seller or an admin may edit or delete it. Stock changes
driven by orders do not come through here; they use InventoryService, which
skips the ownership check and locks the row instead.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import ProtectedError, Q

from infrastructure.observability.tracing import add_span_attributes, get_tracer
from marketplace.catalog.domain.models import Product
from marketplace.infra.observability.metrics import product_operations_total
from utils.pagination import paginate
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

User = get_user_model()
logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

EDITABLE_FIELDS = ("name", "description", "category", "price", "stock_quantity", "is_active")
MAX_NAME_LENGTH = 200
MAX_CATEGORY_LENGTH = 50
# Product.price is DecimalField(max_digits=10, decimal_places=2)
MAX_PRICE = Decimal("100000000")


def _is_owner(product: Product, user) -> bool:
    return user is not None and getattr(user, "is_authenticated", False) and product.seller_id == user.id


class ProductService(BaseService):
    """
    Service for managing marketplace listings.

    Responsibilities:
    - Create products (any authenticated user becomes the seller)
    - Update and delete products (seller or admin only)
    - List, filter and search active products
    - List the categories in use

    All operations return ServiceResult.
    """

    # ===== Validation =====

    def _clean(self, data: Dict[str, Any], creating: bool) -> ServiceResult[Dict[str, Any]]:
        """Validate and normalize product fields; unknown keys are dropped."""
        cleaned = {}

        if creating or "name" in data:
            name = (data.get("name") or "").strip()
            if not name:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Product name is required")
            if len(name) > MAX_NAME_LENGTH:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Product name is too long")
            cleaned["name"] = name

        if "description" in data:
            description = (data.get("description") or "").strip()
            if not description:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Product description is required")
            cleaned["description"] = description

        if "category" in data:
            category = (data.get("category") or "").strip()
            if len(category) > MAX_CATEGORY_LENGTH:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Category is too long")
            cleaned["category"] = category

        if creating or "price" in data:
            try:
                price = Decimal(str(data.get("price")))
            except (InvalidOperation, ValueError):
                return service_err(ErrorCodes.VALIDATION_ERROR, "Price must be a decimal number")
            if not price.is_finite() or price < 0:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Price cannot be negative")
            if price.as_tuple().exponent < -2 or price >= MAX_PRICE:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Price must have at most 8 digits and 2 decimals")
            cleaned["price"] = price

        if "stock_quantity" in data:
            stock = data["stock_quantity"]
            if isinstance(stock, bool) or not isinstance(stock, int):
                return service_err(ErrorCodes.VALIDATION_ERROR, "Stock must be an integer")
            if stock < 0:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Stock cannot be negative")
            cleaned["stock_quantity"] = stock

        if "is_active" in data:
            cleaned["is_active"] = bool(data["is_active"])

        return service_ok(cleaned)

    def _get(self, product_id, for_update: bool = False) -> Optional[Product]:
        queryset = Product.objects.select_related("seller")
        if for_update:
            queryset = queryset.select_for_update(of=("self",))
        try:
            return queryset.filter(id=product_id).first()
        except ValidationError:
            return None

    # ===== Writes =====

    @BaseService.log_performance
    def create_product(self, seller: User, data: Dict[str, Any]) -> ServiceResult[Product]:
        """
        Create a product owned by ``seller``.

        Args:
            seller: Authenticated user listing the product
            data: name and price required; description, category,
                stock_quantity (default 1) and is_active (default True) optional

        Returns:
            ServiceResult with the created Product, or VALIDATION_ERROR

        Example:
            >>> result = product_service.create_product(
            ...     seller, {"name": "Mug", "description": "Hand thrown", "price": "12.50", "stock_quantity": 3}
            ... )
            >>> result.value.seller_id == seller.id
            True
        """
        cleaned = self._clean(data, creating=True)
        if not cleaned.ok:
            product_operations_total.labels(operation="create", status="invalid").inc()
            return cleaned

        try:
            product = Product.objects.create(seller=seller, **cleaned.value)
        except Exception as e:
            product_operations_total.labels(operation="create", status="error").inc()
            self.logger.error(f"Error creating product for seller {seller.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        product_operations_total.labels(operation="create", status="success").inc()
        self.logger.info(f"Created product: {product.name} (id={product.id}) by seller {seller.id}")
        return service_ok(product)

    @BaseService.log_performance
    def update_product(
        self, product_id, user: User, patch: Dict[str, Any], is_admin: bool = False
    ) -> ServiceResult[Product]:
        """
        Apply ``patch`` to a product. Only its seller or an admin may do this.

        Returns:
            ServiceResult with the updated Product, or PRODUCT_NOT_FOUND,
            PERMISSION_DENIED, VALIDATION_ERROR

        Example:
            >>> result = product_service.update_product(product.id, seller, {"price": "9.00"})
            >>> result.value.price
            Decimal('9.00')
        """
        cleaned = self._clean(patch, creating=False)
        if not cleaned.ok:
            product_operations_total.labels(operation="update", status="invalid").inc()
            return cleaned

        try:
            with transaction.atomic():
                product = self._get(product_id, for_update=True)
                if product is None:
                    return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

                if not is_admin and not _is_owner(product, user):
                    product_operations_total.labels(operation="update", status="forbidden").inc()
                    return service_err(ErrorCodes.PERMISSION_DENIED, "You can only update your own products")

                for field, value in cleaned.value.items():
                    setattr(product, field, value)
                product.save(update_fields=list(cleaned.value) + ["updated_at"])

        except Exception as e:
            product_operations_total.labels(operation="update", status="error").inc()
            self.logger.error(f"Error updating product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        product_operations_total.labels(operation="update", status="success").inc()
        self.logger.info(f"Updated product {product_id}, fields={sorted(cleaned.value)}")
        return service_ok(product)

    @BaseService.log_performance
    def delete_product(self, product_id, user: User, is_admin: bool = False) -> ServiceResult[None]:
        """
        Permanently delete a product (seller or admin).

        Products that orders still reference cannot be removed; deactivate
        them with ``is_active=False`` instead (CONFLICT).
        """
        try:
            with transaction.atomic():
                product = self._get(product_id, for_update=True)
                if product is None:
                    return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

                if not is_admin and not _is_owner(product, user):
                    product_operations_total.labels(operation="delete", status="forbidden").inc()
                    return service_err(ErrorCodes.PERMISSION_DENIED, "You can only delete your own products")

                product.delete()

        except ProtectedError:
            product_operations_total.labels(operation="delete", status="conflict").inc()
            return service_err(ErrorCodes.CONFLICT, "Product has orders; deactivate it instead")
        except Exception as e:
            product_operations_total.labels(operation="delete", status="error").inc()
            self.logger.error(f"Error deleting product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        product_operations_total.labels(operation="delete", status="success").inc()
        self.logger.warning(f"Deleted product {product_id} by user {user.id}")
        return service_ok()

    # ===== Reads =====

    @BaseService.log_performance
    def get_product(self, product_id, user: Optional[User] = None, is_admin: bool = False) -> ServiceResult[Product]:
        """Inactive products are visible only to their seller and admins."""
        product = self._get(product_id)
        if product is None or (not product.is_active and not is_admin and not _is_owner(product, user)):
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
        return service_ok(product)

    def _filtered(self, filters: Dict[str, Any]):
        queryset = Product.objects.select_related("seller")

        # Active products only unless is_active is given explicitly
        queryset = queryset.filter(is_active=filters.get("is_active", True))

        if filters.get("seller_id"):
            queryset = queryset.filter(seller_id=filters["seller_id"])
        if filters.get("category"):
            queryset = queryset.filter(category__iexact=filters["category"])
        if filters.get("min_price") is not None:
            queryset = queryset.filter(price__gte=filters["min_price"])
        if filters.get("max_price") is not None:
            queryset = queryset.filter(price__lte=filters["max_price"])
        if filters.get("in_stock"):
            queryset = queryset.filter(stock_quantity__gt=0)

        return queryset.order_by("-created_at", "id")

    @BaseService.log_performance
    def list_products(
        self, filters: Optional[Dict[str, Any]] = None, page: int = 1, page_size: int = 20
    ) -> ServiceResult[Dict[str, Any]]:
        """
        List products with filtering and pagination, newest first.

        Args:
            filters: Optional seller_id, category, min_price, max_price,
                in_stock, is_active (default True)
            page: Page number (1-indexed)
            page_size: Items per page

        Returns:
            ServiceResult with {"results", "count", "page", "page_size", "num_pages"}
        """
        filters = filters or {}
        with tracer.start_as_current_span("marketplace.list_products") as span:
            add_span_attributes(span, filter_count=len(filters), page=page)
            try:
                result = paginate(self._filtered(filters), page, page_size)
            except (ValidationError, ValueError) as e:
                return service_err(ErrorCodes.VALIDATION_ERROR, str(e))

            add_span_attributes(span, result_count=result["count"])
            return service_ok(result)

    @BaseService.log_performance
    def search_products(
        self, query: str, filters: Optional[Dict[str, Any]] = None, page: int = 1, page_size: int = 20
    ) -> ServiceResult[Dict[str, Any]]:
        """Case-insensitive keyword search over name, description and category."""
        query = (query or "").strip()
        if not query:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Search query is required")

        search = Q(name__icontains=query) | Q(description__icontains=query) | Q(category__icontains=query)
        try:
            result = paginate(self._filtered(filters or {}).filter(search), page, page_size)
        except (ValidationError, ValueError) as e:
            return service_err(ErrorCodes.VALIDATION_ERROR, str(e))

        self.logger.info(f"Search: query='{query}', results={result['count']}")
        return service_ok(result)

    def get_categories(self) -> ServiceResult[List[str]]:
        """Distinct non-blank categories of active products, sorted."""
        categories = (
            Product.objects.filter(is_active=True)
            .exclude(category="")
            .values_list("category", flat=True)
            .distinct()
            .order_by("category")
        )
        return service_ok(list(categories))
