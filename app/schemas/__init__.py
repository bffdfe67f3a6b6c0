"""Pydantic request/response schemas."""

from app.schemas.admins import (
    AdminCreateRequest,
    AdminMutationResponse,
    AdminUpdateRequest,
    MessageResponse,
)
from app.schemas.auth import (
    AdminOut,
    AuthContext,
    LoginRequest,
    LoginResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.products import ProductOut, ProductWrite

__all__ = [
    "AdminCreateRequest",
    "AdminMutationResponse",
    "AdminOut",
    "AdminUpdateRequest",
    "AuthContext",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "ProductOut",
    "ProductWrite",
    "ProfileUpdateRequest",
    "ProfileUpdateResponse",
]
