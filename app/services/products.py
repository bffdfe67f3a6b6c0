"""Product catalog operations, including image upload and cleanup in blob storage."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ApiError, BadRequest, NotFound
from app.models import Product
from app.schemas.products import ProductWrite
from app.services.blob_storage import (
    BlobNotConfiguredError,
    BlobStorageError,
    build_image_path,
    remove_image_quietly,
    upload_image,
)

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def sniff_content_type(data: bytes) -> str:
    """Best-effort image type from magic bytes; defaults to JPEG."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def decode_images(encoded: list[str], max_bytes: int) -> list[bytes]:
    """Decode base64 image payloads, skipping blanks. Raises BadRequest on bad input."""
    images: list[bytes] = []
    for i, item in enumerate(encoded):
        if not item or not item.strip():
            continue
        payload = item.strip()
        # Accept data URLs as sent by browsers.
        if payload.startswith("data:") and "," in payload:
            payload = payload.split(",", 1)[1]
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise BadRequest(f"Image at index {i} is not valid base64.")
        if len(data) > max_bytes:
            raise BadRequest(
                f"Image at index {i} exceeds the maximum size of {max_bytes} bytes."
            )
        images.append(data)
    return images


async def _discard_uploads(
    client: httpx.AsyncClient, urls: list[str], settings: Settings
) -> None:
    for url in urls:
        await remove_image_quietly(client, url, settings)


async def _store_images(
    client: httpx.AsyncClient, encoded: list[str], settings: Settings
) -> list[str]:
    """Upload every image or none: a failure part-way removes what was already stored."""
    urls: list[str] = []
    for data in decode_images(encoded, settings.MAX_IMAGE_BYTES):
        content_type = sniff_content_type(data)
        try:
            urls.append(
                await upload_image(
                    client, build_image_path(content_type), data, content_type, settings
                )
            )
        except BlobNotConfiguredError as e:
            await _discard_uploads(client, urls, settings)
            raise ApiError(e.message, status_code=503) from e
        except BlobStorageError as e:
            logger.error("Image upload failed: %s", e.message)
            await _discard_uploads(client, urls, settings)
            raise ApiError("Image upload failed.", status_code=502) from e
    return urls


async def _commit_or_discard(
    db: Session, client: httpx.AsyncClient, uploaded: list[str], settings: Settings
) -> None:
    """Commit the session; on failure roll back and drop the blobs uploaded for it."""
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        await _discard_uploads(client, uploaded, settings)
        raise


def list_products(db: Session) -> list[Product]:
    return db.query(Product).order_by(Product.id).all()


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is None:
        raise NotFound("Product not found.")
    return product


async def create_product(
    db: Session, body: ProductWrite, client: httpx.AsyncClient, settings: Settings
) -> Product:
    images = await _store_images(client, body.images_to_add, settings)
    product = Product(
        name=body.name,
        price=body.price,
        images=images,
        stock=body.stock if body.stock is not None else 0,
    )
    db.add(product)
    await _commit_or_discard(db, client, images, settings)
    db.refresh(product)
    logger.info("Product created", extra={"product_id": product.id, "image_count": len(images)})
    return product


async def update_product(
    db: Session,
    product_id: int,
    body: ProductWrite,
    client: httpx.AsyncClient,
    settings: Settings,
) -> Product:
    """
    Replace name/price, keep stock unless supplied, append uploaded imagesToAdd
    and detach imagesToRemove. Only URLs this product lists are detached, and
    they are deleted from storage best-effort after the row is committed.
    """
    product = get_product(db, product_id)
    current = list(product.images or [])
    detached = [url for url in dict.fromkeys(body.images_to_remove) if url in current]

    uploaded = await _store_images(client, body.images_to_add, settings)

    product.name = body.name
    product.price = body.price
    product.images = [url for url in current if url not in detached] + uploaded
    if body.stock is not None:
        product.stock = body.stock
    await _commit_or_discard(db, client, uploaded, settings)
    db.refresh(product)

    for url in detached:
        await remove_image_quietly(client, url, settings)
    return product


async def delete_product(
    db: Session, product_id: int, client: httpx.AsyncClient, settings: Settings
) -> None:
    """Delete the row, then its images in storage best-effort."""
    product = get_product(db, product_id)
    images = list(product.images or [])
    db.delete(product)
    db.commit()
    for url in images:
        await remove_image_quietly(client, url, settings)
    logger.info("Product deleted", extra={"product_id": product_id})
