"""
==============================================================================
Catalog Package - Product Management
==============================================================================

Product records and their in-memory repository.

Classes:
--------
- Product: Pydantic model for products
- ProductMessageResponse: Response body for mutations
- ProductRepository: Ordered in-memory product collection

==============================================================================
"""

from .models import Product, ProductMessageResponse
from .repository import ProductRepository

__all__ = [
    "Product",
    "ProductMessageResponse",
    "ProductRepository",
]
