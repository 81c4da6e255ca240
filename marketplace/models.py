from marketplace.catalog.domain.models import Product
from marketplace.ordering.domain.models import Order


__all__ = ["Order", "Product"]
