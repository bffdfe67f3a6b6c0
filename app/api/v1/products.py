"""Product routes: public catalog reads and authenticated admin writes."""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.schemas.admins import MessageResponse
from app.schemas.auth import AuthContext
from app.schemas.products import ProductOut, ProductWrite
from app.services import products as product_service
from app.services.auth import require_admin
from app.services.blob_storage import get_blob_client

public_router = APIRouter()
admin_router = APIRouter()

ProductId = Annotated[int, Path(ge=1, description="Product id")]


@public_router.get("", response_model=list[ProductOut])
def list_products(db: Annotated[Session, Depends(get_db)]) -> list[ProductOut]:
    return [ProductOut.model_validate(p) for p in product_service.list_products(db)]


@public_router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: ProductId,
    db: Annotated[Session, Depends(get_db)],
) -> ProductOut:
    return ProductOut.model_validate(product_service.get_product(db, product_id))


@admin_router.post("", response_model=ProductOut, status_code=201)
async def create_product(
    body: ProductWrite,
    _admin: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    client: Annotated[httpx.AsyncClient, Depends(get_blob_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ProductOut:
    """Create a product. imagesToAdd (base64) are uploaded to blob storage first."""
    product = await product_service.create_product(db, body, client, settings)
    return ProductOut.model_validate(product)


@admin_router.put("/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: ProductId,
    body: ProductWrite,
    _admin: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    client: Annotated[httpx.AsyncClient, Depends(get_blob_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ProductOut:
    product = await product_service.update_product(db, product_id, body, client, settings)
    return ProductOut.model_validate(product)


@admin_router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: ProductId,
    _admin: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    client: Annotated[httpx.AsyncClient, Depends(get_blob_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """Delete a product and, best-effort, its images in blob storage."""
    await product_service.delete_product(db, product_id, client, settings)
    return MessageResponse(message="Product deleted successfully.")
