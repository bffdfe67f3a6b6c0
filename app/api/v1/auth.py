"""Login and self-service profile routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import NotFound
from app.schemas.auth import (
    AdminOut,
    AuthContext,
    LoginRequest,
    LoginResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
)
from app.services.admins import AdminRepository
from app.services.auth import (
    AuthConfig,
    authenticate,
    get_auth_config,
    require_admin,
    update_profile,
)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> LoginResponse:
    """
    Authenticate with identifier (email or username) and password.
    Send the returned token as `x-access-token: <token>` or `Authorization: Bearer <token>`.
    """
    result = authenticate(AdminRepository(db), body.identifier, body.password, config)
    return LoginResponse(token=result.token, user_type=result.role)


@router.get("/profile", response_model=AdminOut)
def get_profile(
    current: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminOut:
    """Return the caller's own administrator record (no password hash)."""
    admin = AdminRepository(db).find_by_id(current.id)
    if admin is None:
        raise NotFound("Administrator not found.")
    return AdminOut.model_validate(admin)


@router.put("/profile", response_model=ProfileUpdateResponse, response_model_exclude_none=True)
def put_profile(
    body: ProfileUpdateRequest,
    current: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> ProfileUpdateResponse:
    """
    Update username, email and/or password. currentPassword is required for any change.
    A new token is returned only when username or email changed.
    """
    result = update_profile(AdminRepository(db), current, body, config)
    return ProfileUpdateResponse(
        message="Profile updated successfully.",
        admin=AdminOut.model_validate(result.admin),
        token=result.token,
    )
