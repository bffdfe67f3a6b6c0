"""Request/response schemas for catalog products."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ProductOut(BaseModel):
    """Product as returned by public and admin endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    images: list[str] = Field(default_factory=list)
    stock: int


class ProductWrite(BaseModel):
    """
    Create/update body. imagesToAdd holds base64-encoded image data that is
    uploaded to blob storage; imagesToRemove lists public URLs to detach.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=3, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int | None = Field(default=None, ge=0)
    images_to_add: list[str] = Field(default_factory=list, alias="imagesToAdd")
    images_to_remove: list[str] = Field(default_factory=list, alias="imagesToRemove")
