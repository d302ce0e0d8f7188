"""
==============================================================================
Catalog Service Module
==============================================================================

Business logic for product CRUD with image uploads and live broadcast.

This module implements:
- CatalogPublisher: Interface of the broadcast channel used by the service
- CatalogService: Validation, image lifecycle and repository orchestration

Image Lifecycle Rules:
---------------------
1. An uploaded image is validated and stored before form fields are checked
2. If the request then fails (missing field, bad price, unknown id) the
   stored image is deleted before the error propagates
3. When an update replaces an image, the previous file is scheduled for
   deletion only after the product points to the new one
4. Deleting a product schedules deletion of its image, if it has one

Every successful create, update and delete publishes the full catalog
exactly once, after the repository change.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from app.catalog import Product, ProductRepository
from app.core import exceptions
from app.storage import ImageStore, ImageUpload
from app.utils.validators import PriceValidator, RequiredFieldsValidator, blank_to_none


# Module logger
logger = logging.getLogger(__name__)


class CatalogPublisher(Protocol):
    """Anything that can push the full catalog to live clients."""

    async def publish(self, products: List[Product]) -> int:
        ...


class CatalogService:
    """
    Service for catalog operations.

    Attributes:
        _repository: Product repository (owned by the caller)
        _images: Image store for uploads
        _publisher: Broadcast channel for catalog snapshots

    Example:
        >>> service = CatalogService(ProductRepository(), store, broadcaster)
        >>> product = await service.create_product("Chair", "Wood chair", "49.90")
        >>> product.price
        49.9
    """

    REQUIRED_FIELDS = ["titulo", "descricao", "preco"]

    def __init__(
        self,
        repository: ProductRepository,
        image_store: ImageStore,
        publisher: CatalogPublisher
    ) -> None:
        self._repository = repository
        self._images = image_store
        self._publisher = publisher
        self._required = RequiredFieldsValidator(self.REQUIRED_FIELDS)
        self._price = PriceValidator()

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def list_products(self) -> List[Product]:
        """Get all products in insertion order."""
        return self._repository.list()

    def get_product(self, product_id: str) -> Product:
        """Get one product or raise PRODUCT_NOT_FOUND."""
        return self._repository.get(product_id)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def create_product(
        self,
        titulo: Optional[str],
        descricao: Optional[str],
        preco: Optional[str],
        image: Optional[ImageUpload] = None
    ) -> Product:
        """
        Create a product.

        Args:
            titulo: Title (required)
            descricao: Description (required)
            preco: Price as submitted (required, non-negative number)
            image: Optional uploaded image

        Returns:
            The created product

        Raises:
            AppException: MISSING_FIELDS, INVALID_PRICE, INVALID_FILE_TYPE,
                FILE_TOO_LARGE or STORAGE_ERROR
        """
        reference = await self._accept_image(image)

        try:
            is_valid, missing = self._required.validate(
                {"titulo": titulo, "descricao": descricao, "preco": preco}
            )
            if not is_valid:
                raise exceptions.missing_fields(missing)

            price = self._parse_price(preco)

            product = self._repository.insert(
                Product.create(
                    title=titulo.strip(),
                    description=descricao.strip(),
                    price=price,
                    image_url=reference,
                )
            )
        except Exception:
            await self._rollback(reference)
            raise

        logger.info(f"✅ Product created: {product.id} ({product.title})")
        await self._broadcast()
        return product

    async def update_product(
        self,
        product_id: str,
        titulo: Optional[str] = None,
        descricao: Optional[str] = None,
        preco: Optional[str] = None,
        image: Optional[ImageUpload] = None
    ) -> Product:
        """
        Partially update a product.

        Omitted fields keep their current value. Blank text fields count
        as omitted, but only an empty price does: a whitespace price is
        rejected as invalid. A new image replaces the previous one, whose
        file is then removed in the background.

        Raises:
            AppException: PRODUCT_NOT_FOUND, INVALID_PRICE, INVALID_FILE_TYPE,
                FILE_TOO_LARGE or STORAGE_ERROR
        """
        reference = await self._accept_image(image)

        try:
            current = self._repository.get(product_id)

            patch = {}
            if blank_to_none(titulo) is not None:
                patch["title"] = titulo.strip()
            if blank_to_none(descricao) is not None:
                patch["description"] = descricao.strip()
            if preco is not None and preco != "":
                patch["price"] = self._parse_price(preco)
            if reference is not None:
                patch["image_url"] = reference

            product = self._repository.update(product_id, patch)
        except Exception:
            await self._rollback(reference)
            raise

        previous = current.image_url
        if reference is not None and previous and previous != reference:
            self._images.schedule_delete(previous)

        logger.info(f"✏️ Product updated: {product.id} {sorted(patch)}")
        await self._broadcast()
        return product

    async def delete_product(self, product_id: str) -> Product:
        """
        Delete a product and schedule removal of its image.

        Raises:
            AppException: PRODUCT_NOT_FOUND
        """
        product = self._repository.remove(product_id)

        if product.image_url:
            self._images.schedule_delete(product.image_url)

        logger.info(f"🗑️ Product deleted: {product.id} ({product.title})")
        await self._broadcast()
        return product

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _parse_price(self, raw: Optional[str]) -> float:
        is_valid, price, _ = self._price.validate(raw)
        if not is_valid:
            raise exceptions.invalid_price(raw)
        return price

    async def _accept_image(self, image: Optional[ImageUpload]) -> Optional[str]:
        if image is None:
            return None
        return await self._images.accept(image)

    async def _rollback(self, reference: Optional[str]) -> None:
        """Delete an upload whose request failed."""
        if reference is None:
            return
        logger.info(f"↩️ Rolling back upload {reference}")
        await self._images.delete(reference)

    async def _broadcast(self) -> None:
        products = self._repository.list()
        await self._publisher.publish(products)
