"""Owner-only administrator management routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import BadRequest, Forbidden, NotFound
from app.core.security import hash_password
from app.schemas.admins import (
    AdminCreateRequest,
    AdminMutationResponse,
    AdminUpdateRequest,
    MessageResponse,
)
from app.schemas.auth import AdminOut, AuthContext
from app.services.admins import AdminRepository
from app.services.auth import AuthConfig, get_auth_config, require_owner

logger = logging.getLogger(__name__)
router = APIRouter()

AdminId = Annotated[int, Path(ge=1, description="Administrator id")]


@router.post("", response_model=AdminMutationResponse, status_code=201)
def create_admin(
    body: AdminCreateRequest,
    _owner: Annotated[AuthContext, Depends(require_owner)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminMutationResponse:
    repo = AdminRepository(db)
    repo.ensure_available("username", body.username)
    repo.ensure_available("email", body.email)
    admin = repo.create(body.username, body.email, hash_password(body.password))
    logger.info("Administrator created", extra={"admin_id": admin.id})
    return AdminMutationResponse(
        message="Administrator created successfully.",
        admin=AdminOut.model_validate(admin),
    )


@router.get("", response_model=list[AdminOut])
def list_admins(
    _owner: Annotated[AuthContext, Depends(require_owner)],
    db: Annotated[Session, Depends(get_db)],
) -> list[AdminOut]:
    return [AdminOut.model_validate(a) for a in AdminRepository(db).list_all()]


@router.get("/{admin_id}", response_model=AdminOut)
def get_admin(
    admin_id: AdminId,
    _owner: Annotated[AuthContext, Depends(require_owner)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminOut:
    admin = AdminRepository(db).find_by_id(admin_id)
    if admin is None:
        raise NotFound("Administrator not found.")
    return AdminOut.model_validate(admin)


@router.put("/{admin_id}", response_model=AdminMutationResponse)
def update_admin(
    admin_id: AdminId,
    body: AdminUpdateRequest,
    _owner: Annotated[AuthContext, Depends(require_owner)],
    db: Annotated[Session, Depends(get_db)],
) -> AdminMutationResponse:
    """Change another administrator's username and/or email (no password, no token)."""
    if body.username is None and body.email is None:
        raise BadRequest("At least one of username or email must be provided.")
    repo = AdminRepository(db)
    admin = repo.find_by_id(admin_id)
    if admin is None:
        raise NotFound("Administrator not found.")

    fields: dict[str, str] = {}
    if body.username is not None and body.username != admin.username:
        repo.ensure_available("username", body.username, exclude_id=admin_id)
        fields["username"] = body.username
    if body.email is not None and body.email != admin.email:
        repo.ensure_available("email", body.email, exclude_id=admin_id)
        fields["email"] = body.email
    if fields:
        admin = repo.update(admin, **fields)
    return AdminMutationResponse(
        message="Administrator updated successfully.",
        admin=AdminOut.model_validate(admin),
    )


@router.delete("/{admin_id}", response_model=MessageResponse)
def delete_admin(
    admin_id: AdminId,
    _owner: Annotated[AuthContext, Depends(require_owner)],
    db: Annotated[Session, Depends(get_db)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> MessageResponse:
    if admin_id == config.owner_id:
        raise Forbidden("The Owner cannot be deleted.")
    if not AdminRepository(db).delete(admin_id):
        raise NotFound("Administrator not found.")
    logger.info("Administrator deleted", extra={"admin_id": admin_id})
    return MessageResponse(message="Administrator deleted successfully.")
