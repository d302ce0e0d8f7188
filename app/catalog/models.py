"""
==============================================================================
Product Models Module
==============================================================================

Pydantic models for catalog products.

Attributes use English names in Python; the JSON/form wire names follow the
public API contract (titulo, descricao, preco, fotoUrl, createdAt, updatedAt).

==============================================================================
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Product(BaseModel):
    """
    Catalog product.

    Attributes:
        id: Server-generated unique identifier (UUID4 string)
        title: Product title (wire name ``titulo``)
        description: Product description (wire name ``descricao``)
        price: Non-negative price (wire name ``preco``)
        image_url: Public path of the uploaded image, or None (``fotoUrl``)
        created_at: Creation timestamp (``createdAt``)
        updated_at: Last modification timestamp (``updatedAt``)
    """

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = Field(..., min_length=1, alias="titulo")
    description: str = Field(..., min_length=1, alias="descricao")
    price: float = Field(..., ge=0, allow_inf_nan=False, alias="preco")
    image_url: Optional[str] = Field(default=None, alias="fotoUrl")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    @model_validator(mode="after")
    def check_timestamps(self) -> "Product":
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt cannot be earlier than createdAt")
        return self

    @classmethod
    def create(
        cls,
        title: str,
        description: str,
        price: float,
        image_url: Optional[str] = None
    ) -> "Product":
        """Build a new product with a fresh id and equal timestamps."""
        now = utcnow()
        return cls(
            title=title,
            description=description,
            price=price,
            image_url=image_url,
            created_at=now,
            updated_at=now,
        )

    def to_public(self) -> Dict[str, Any]:
        """JSON-ready dict using wire names."""
        return self.model_dump(mode="json", by_alias=True)


class ProductMessageResponse(BaseModel):
    """Response body for create, update and delete."""

    message: str
    product: Product
