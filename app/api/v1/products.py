"""
==============================================================================
Product Catalog Endpoints
==============================================================================

CRUD endpoints for catalog products.

Create and update accept multipart (or urlencoded) forms with the fields
``titulo``, ``descricao``, ``preco`` and an optional image file ``foto``.
The same text fields may also be sent as an ``application/json`` object,
in which case no image can be attached.

==============================================================================
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status

from app.catalog import Product, ProductMessageResponse
from app.core import exceptions
from app.core.dependencies import get_catalog_service, get_image_store
from app.services import CatalogService
from app.storage import ImageStore, ImageUpload


router = APIRouter(prefix="/products", tags=["Products"])

TEXT_FIELDS = ("titulo", "descricao", "preco")


class ProductController:
    """Controller translating HTTP input into catalog operations."""

    def __init__(self, service: CatalogService, image_store: ImageStore):
        self._service = service
        self._images = image_store

    async def read_upload(self, foto: Optional[UploadFile]) -> Optional[ImageUpload]:
        """
        Read an uploaded file into memory.

        At most one byte past the size limit is read, which is enough for
        the image store to reject oversized files.
        """
        if foto is None or not foto.filename:
            return None

        try:
            data = await foto.read(self._images.max_bytes + 1)
        finally:
            await foto.close()

        return ImageUpload(
            data=data,
            filename=foto.filename,
            content_type=foto.content_type,
        )

    @staticmethod
    async def read_json_fields(request: Request) -> Optional[Dict[str, Optional[str]]]:
        """
        Read the text fields from a JSON body.

        Returns:
            Field values as text, or None when the body is not JSON

        Raises:
            AppException: VALIDATION_ERROR for malformed JSON or a non-object body
        """
        content_type = request.headers.get("content-type", "")
        if content_type.split(";")[0].strip().lower() != "application/json":
            return None

        try:
            body = await request.json()
        except ValueError as e:
            raise exceptions.validation_error("Request body is not valid JSON") from e

        if not isinstance(body, dict):
            raise exceptions.validation_error("Request body must be a JSON object")

        return {name: _as_text(body.get(name)) for name in TEXT_FIELDS}

    def list_products(self) -> List[Product]:
        return self._service.list_products()

    def get_product(self, product_id: str) -> Product:
        return self._service.get_product(product_id)

    async def create(
        self,
        titulo: Optional[str],
        descricao: Optional[str],
        preco: Optional[str],
        foto: Optional[UploadFile]
    ) -> ProductMessageResponse:
        image = await self.read_upload(foto)
        product = await self._service.create_product(titulo, descricao, preco, image)
        return ProductMessageResponse(message="Product created successfully!", product=product)

    async def update(
        self,
        product_id: str,
        titulo: Optional[str],
        descricao: Optional[str],
        preco: Optional[str],
        foto: Optional[UploadFile]
    ) -> ProductMessageResponse:
        image = await self.read_upload(foto)
        product = await self._service.update_product(
            product_id, titulo, descricao, preco, image
        )
        return ProductMessageResponse(message="Product updated successfully!", product=product)

    async def delete(self, product_id: str) -> ProductMessageResponse:
        product = await self._service.delete_product(product_id)
        return ProductMessageResponse(message="Product deleted successfully!", product=product)


def _as_text(value: Any) -> Optional[str]:
    # JSON clients may send preco as a number
    if value is None or isinstance(value, str):
        return value
    return str(value)


def get_controller(
    service: CatalogService = Depends(get_catalog_service),
    image_store: ImageStore = Depends(get_image_store)
) -> ProductController:
    return ProductController(service, image_store)


@router.get("", response_model=List[Product])
async def list_products(controller: ProductController = Depends(get_controller)):
    """List all products in insertion order."""
    return controller.list_products()


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    controller: ProductController = Depends(get_controller)
):
    """Get a product by id."""
    return controller.get_product(product_id)


@router.post(
    "",
    response_model=ProductMessageResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_product(
    request: Request,
    titulo: Optional[str] = Form(None),
    descricao: Optional[str] = Form(None),
    preco: Optional[str] = Form(None),
    foto: Optional[UploadFile] = File(None),
    controller: ProductController = Depends(get_controller)
):
    """Create a product, optionally with an image."""
    fields = await controller.read_json_fields(request)
    if fields is not None:
        return await controller.create(**fields, foto=None)
    return await controller.create(titulo, descricao, preco, foto)


@router.put("/{product_id}", response_model=ProductMessageResponse)
async def update_product(
    product_id: str,
    request: Request,
    titulo: Optional[str] = Form(None),
    descricao: Optional[str] = Form(None),
    preco: Optional[str] = Form(None),
    foto: Optional[UploadFile] = File(None),
    controller: ProductController = Depends(get_controller)
):
    """
    Partially update a product.

    Omitted or empty fields keep their value. A new ``foto`` replaces the
    current image and the old file is removed.
    """
    fields = await controller.read_json_fields(request)
    if fields is not None:
        return await controller.update(product_id, **fields, foto=None)
    return await controller.update(product_id, titulo, descricao, preco, foto)


@router.delete("/{product_id}", response_model=ProductMessageResponse)
async def delete_product(
    product_id: str,
    controller: ProductController = Depends(get_controller)
):
    """Delete a product and its image."""
    return await controller.delete(product_id)
