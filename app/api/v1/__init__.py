"""API routes."""

from fastapi import APIRouter

from app.api.v1 import admins, auth, health, products

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(products.public_router, prefix="/products", tags=["products"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(products.admin_router, prefix="/admin/products", tags=["admin"])
router.include_router(admins.router, prefix="/admin/administrators", tags=["admin"])
