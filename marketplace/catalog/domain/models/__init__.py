from .catalog import Product

__all__ = ["Product"]
