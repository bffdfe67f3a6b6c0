"""Product image storage on a Vercel-Blob style HTTP API."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

BLOB_API_VERSION = "7"

EXTENSIONS_BY_CONTENT_TYPE = {
    "image/png": "png",
    "image/webp": "webp",
    "image/jpeg": "jpg",
}


class BlobNotConfiguredError(Exception):
    """Raised when an upload is attempted without BLOB_READ_WRITE_TOKEN."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BlobStorageError(Exception):
    """Raised when the blob API rejects an upload or delete."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def is_blob_configured(settings: Settings) -> bool:
    if settings.BLOB_READ_WRITE_TOKEN is None:
        return False
    return bool(settings.BLOB_READ_WRITE_TOKEN.get_secret_value().strip())


def _headers(settings: Settings) -> dict[str, str]:
    if not is_blob_configured(settings):
        raise BlobNotConfiguredError("Blob storage is not configured; set BLOB_READ_WRITE_TOKEN.")
    token = settings.BLOB_READ_WRITE_TOKEN.get_secret_value().strip()
    return {
        "authorization": f"Bearer {token}",
        "x-api-version": BLOB_API_VERSION,
    }


def build_image_path(content_type: str, prefix: str = "products") -> str:
    """Unique object name like products/1718000000000_k3j9x0ab.jpg."""
    ext = EXTENSIONS_BY_CONTENT_TYPE.get(content_type, "jpg")
    millis = int(time.time() * 1000)
    suffix = secrets.token_hex(4)
    return f"{prefix}/{millis}_{suffix}.{ext}"


def path_from_public_url(url: str | None) -> str | None:
    """Blob deletes are addressed by the full public URL; blank input yields None."""
    if not url or not url.strip():
        return None
    return url.strip()


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
        err = body.get("error") if isinstance(body, dict) else None
        if isinstance(err, dict):
            return str(err.get("message") or err)[:500]
        return str(body)[:500]
    except Exception:
        return resp.text[:500] if resp.text else "Unknown error"


async def upload_image(
    client: httpx.AsyncClient,
    path: str,
    data: bytes,
    content_type: str,
    settings: Settings,
) -> str:
    """Store data at path with public access. Returns the public URL."""
    headers = _headers(settings)
    headers["x-content-type"] = content_type
    headers["x-add-random-suffix"] = "0"
    url = f"{settings.BLOB_API_URL}/{path}"
    try:
        resp = await client.put(
            url,
            content=data,
            headers=headers,
            timeout=settings.BLOB_REQUEST_TIMEOUT_SEC,
        )
    except httpx.HTTPError as e:
        raise BlobStorageError(f"Blob storage unreachable: {e!s}") from e
    if resp.status_code >= 400:
        raise BlobStorageError(
            f"Image upload failed ({resp.status_code}): {_error_detail(resp)}",
            resp.status_code,
        )
    try:
        body = resp.json()
    except ValueError:
        body = None
    public_url = body.get("url") if isinstance(body, dict) else None
    if not isinstance(public_url, str) or not public_url:
        raise BlobStorageError("Blob storage response missing url.")
    return public_url


async def remove_image(client: httpx.AsyncClient, url: str, settings: Settings) -> None:
    """Delete one object by public URL. Raises BlobStorageError on failure."""
    headers = _headers(settings)
    try:
        resp = await client.post(
            f"{settings.BLOB_API_URL}/delete",
            json={"urls": [url]},
            headers=headers,
            timeout=settings.BLOB_REQUEST_TIMEOUT_SEC,
        )
    except httpx.HTTPError as e:
        raise BlobStorageError(f"Blob storage unreachable: {e!s}") from e
    if resp.status_code >= 400:
        raise BlobStorageError(
            f"Image delete failed ({resp.status_code}): {_error_detail(resp)}",
            resp.status_code,
        )


async def remove_image_quietly(
    client: httpx.AsyncClient, url: str, settings: Settings
) -> bool:
    """
    Best-effort delete used during product cleanup. Failures are logged and
    never propagate, so the database mutation always proceeds.
    """
    path = path_from_public_url(url)
    if path is None:
        return False
    try:
        await remove_image(client, path, settings)
        return True
    except (BlobStorageError, BlobNotConfiguredError) as e:
        logger.warning("Failed to remove image from storage: %s", e.message, extra={"url": url})
        return False


async def get_blob_client() -> AsyncIterator[httpx.AsyncClient]:
    """Dependency that yields an HTTP client for the blob API and closes it when done."""
    async with httpx.AsyncClient() as client:
        yield client
