from .inventory_service import InventoryService
from .product_service import ProductService

__all__ = ["InventoryService", "ProductService"]
