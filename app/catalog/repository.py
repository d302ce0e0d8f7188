"""
==============================================================================
Product Repository Module
==============================================================================

In-memory ordered product collection.

The repository is the only owner of product records. It performs no I/O and
never awaits, so on a single asyncio event loop every operation runs to
completion before another request can touch the collection.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from app.core import exceptions
from .models import Product, utcnow


# Module logger
logger = logging.getLogger(__name__)


class ProductRepository:
    """
    In-memory product store keyed by id, preserving insertion order.

    Example:
        >>> repo = ProductRepository()
        >>> repo.insert(Product.create("Chair", "Wood chair", 49.9))
        >>> len(repo)
        1
    """

    # Fields a patch may change; id and createdAt are immutable
    UPDATABLE_FIELDS = frozenset({"title", "description", "price", "image_url"})

    def __init__(self) -> None:
        self._products: Dict[str, Product] = {}

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def list(self) -> List[Product]:
        """All products in insertion order."""
        return list(self._products.values())

    def get(self, product_id: str) -> Product:
        """
        Get product by id.

        Raises:
            AppException: PRODUCT_NOT_FOUND if absent
        """
        product = self._products.get(product_id)
        if product is None:
            raise exceptions.product_not_found(product_id)
        return product

    def insert(self, product: Product) -> Product:
        """Append a new product. Ids are generated, so a clash is a bug."""
        if product.id in self._products:
            raise ValueError(f"Duplicate product id: {product.id}")

        self._products[product.id] = product
        logger.debug(f"Inserted product {product.id}")
        return product

    def update(self, product_id: str, patch: Dict[str, Any]) -> Product:
        """
        Apply a partial update and refresh updatedAt.

        The patched record is fully re-validated before it replaces the
        stored one, so a rejected patch leaves the product untouched.

        Args:
            product_id: Target product id
            patch: Mapping of attribute name to new value

        Returns:
            The updated product

        Raises:
            AppException: PRODUCT_NOT_FOUND if absent
            ValueError: If patch names a field that cannot be updated
        """
        current = self.get(product_id)

        unknown = set(patch) - self.UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        data = current.model_dump()
        data.update(patch)
        data["updated_at"] = max(utcnow(), current.created_at)

        updated = Product.model_validate(data)
        self._products[product_id] = updated
        logger.debug(f"Updated product {product_id}: {sorted(patch)}")
        return updated

    def remove(self, product_id: str) -> Product:
        """
        Delete a product and return it.

        Raises:
            AppException: PRODUCT_NOT_FOUND if absent
        """
        product = self._products.pop(product_id, None)
        if product is None:
            raise exceptions.product_not_found(product_id)

        logger.debug(f"Removed product {product_id}")
        return product
