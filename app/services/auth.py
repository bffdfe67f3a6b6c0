"""
Authentication core: owner/role policy, bearer-token guards, login and
self-service profile updates.

Every token is issued through issue_for(), which derives the role with
compute_role(); the Owner guard uses the same is_owner() predicate, so the
role embedded at login and the role enforced on Owner-only routes agree.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Annotated, Any, Literal

from fastapi import Depends, Header, Request

from app.core.config import get_settings
from app.core.errors import BadRequest, Forbidden, NotFound, Unauthorized
from app.core.security import (
    ExpiredError,
    MalformedError,
    decode_token,
    hash_password,
    issue_token,
    verify_password,
)
from app.models import Administrator
from app.schemas.auth import AuthContext, ProfileUpdateRequest
from app.services.admins import AdminRepository

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

Role = Literal["Owner", "admin"]
OWNER_ROLE: Role = "Owner"
ADMIN_ROLE: Role = "admin"

INVALID_CREDENTIALS = "Invalid credentials."


@dataclass(frozen=True)
class AuthConfig:
    """Process-wide auth configuration, built once and handed to the auth flows."""

    token_secret: str | None
    owner_id: int = 1
    owner_email: str | None = None
    algorithm: str = "HS256"
    token_ttl: timedelta = timedelta(hours=24)
    label_field: Literal["email", "username"] = "email"

    @classmethod
    def from_settings(cls, settings: "Settings") -> "AuthConfig":
        secret = settings.JWT_SECRET.get_secret_value() if settings.JWT_SECRET else None
        return cls(
            token_secret=secret,
            owner_id=settings.OWNER_ID,
            owner_email=settings.OWNER_EMAIL,
            algorithm=settings.JWT_ALGORITHM,
            token_ttl=timedelta(hours=settings.JWT_EXPIRE_HOURS),
            label_field=settings.AUTH_LABEL_FIELD,
        )


def get_auth_config() -> AuthConfig:
    """Dependency: auth configuration derived from cached settings."""
    return AuthConfig.from_settings(get_settings())


def is_owner(admin_id: Any, email: str | None, config: AuthConfig) -> bool:
    """True when the identity matches the configured Owner (id, plus email when configured)."""
    if admin_id != config.owner_id:
        return False
    if config.owner_email is None:
        return True
    return (email or "").lower() == config.owner_email


def compute_role(admin: Administrator, config: AuthConfig) -> Role:
    return OWNER_ROLE if is_owner(admin.id, admin.email, config) else ADMIN_ROLE


def build_claims(admin: Administrator, config: AuthConfig) -> dict[str, Any]:
    return {
        "id": admin.id,
        "email": admin.email,
        "username": admin.username,
        "userType": compute_role(admin, config),
    }


def issue_for(admin: Administrator, config: AuthConfig) -> str:
    """Issue a bearer token reflecting the administrator's current identity and role."""
    return issue_token(
        build_claims(admin, config),
        config.token_secret,
        ttl=config.token_ttl,
        algorithm=config.algorithm,
    )


def extract_token(x_access_token: str | None, authorization: str | None) -> str | None:
    """Token from x-access-token, else from 'Authorization: Bearer <token>'."""
    if x_access_token and x_access_token.strip():
        return x_access_token.strip()
    if authorization:
        value = authorization.strip()
        if value[:7].lower() == "bearer ":
            value = value[7:].strip()
        return value or None
    return None


class AuthGuard:
    """
    Dependency: require a valid, unexpired bearer token and return the caller.

    Any validly signed token is accepted; no role check is made. The context is
    also stored on request.state.admin for downstream handlers.
    """

    def authenticate(
        self,
        x_access_token: str | None,
        authorization: str | None,
        config: AuthConfig,
    ) -> AuthContext:
        token = extract_token(x_access_token, authorization)
        if token is None:
            raise Unauthorized("Token not provided.")
        try:
            claims = decode_token(token, config.token_secret, algorithm=config.algorithm)
        except ExpiredError:
            logger.info("Rejected expired token")
            raise Unauthorized("Token expired.")
        except MalformedError as e:
            logger.info("Rejected invalid token: %s", e)
            raise Unauthorized("Invalid token.")
        except Exception:
            logger.warning("Token verification failed", exc_info=True)
            raise Unauthorized("Authentication failed.")

        admin_id = claims.get("id")
        if not isinstance(admin_id, int) or isinstance(admin_id, bool):
            raise Unauthorized("Invalid token.")
        return self.authorize(claims, config)

    def authorize(self, claims: dict[str, Any], config: AuthConfig) -> AuthContext:
        email = claims.get("email")
        label = claims.get(config.label_field) or email or claims.get("username") or ""
        return AuthContext(
            id=claims["id"],
            label=label,
            email=email,
            role=claims.get("userType") or ADMIN_ROLE,
        )

    def __call__(
        self,
        request: Request,
        config: Annotated[AuthConfig, Depends(get_auth_config)],
        x_access_token: Annotated[str | None, Header()] = None,
        authorization: Annotated[str | None, Header()] = None,
    ) -> AuthContext:
        ctx = self.authenticate(x_access_token, authorization, config)
        request.state.admin = ctx
        return ctx


class OwnerGuard(AuthGuard):
    """AuthGuard that additionally requires the configured Owner identity."""

    def authorize(self, claims: dict[str, Any], config: AuthConfig) -> AuthContext:
        if not is_owner(claims["id"], claims.get("email"), config):
            logger.info("Owner-only access denied for admin id=%s", claims["id"])
            raise Forbidden("Access denied. Only the Owner can access this resource.")
        ctx = super().authorize(claims, config)
        return ctx.model_copy(update={"role": OWNER_ROLE})


require_admin = AuthGuard()
require_owner = OwnerGuard()


@dataclass
class LoginResult:
    token: str
    role: Role


def authenticate(
    repo: AdminRepository,
    identifier: str,
    password: str,
    config: AuthConfig,
) -> LoginResult:
    """
    Verify identifier + password and issue a token.

    Unknown identifier and wrong password raise the same Unauthorized so the
    response does not reveal which accounts exist.
    """
    value = identifier.strip()
    if config.label_field == "email":
        value = value.lower()
    admin = repo.find_by_identifier(config.label_field, value)
    if admin is None or not verify_password(password, admin.password_hash):
        raise Unauthorized(INVALID_CREDENTIALS)
    role = compute_role(admin, config)
    logger.info("Administrator logged in", extra={"admin_id": admin.id, "role": role})
    return LoginResult(token=issue_for(admin, config), role=role)


@dataclass
class ProfileUpdateResult:
    admin: Administrator
    token: str | None = None


def update_profile(
    repo: AdminRepository,
    ctx: AuthContext,
    changes: ProfileUpdateRequest,
    config: AuthConfig,
) -> ProfileUpdateResult:
    """
    Apply a self-service update to the caller's own record.

    The current password gates every change. A new token is issued only when
    username or email actually changed; a password-only change keeps the
    existing token valid until it expires.
    """
    admin = repo.find_by_id(ctx.id)
    if admin is None:
        raise NotFound("Administrator not found.")

    wants_change = (
        changes.username is not None
        or changes.email is not None
        or changes.new_password is not None
    )
    if wants_change and not changes.current_password:
        raise BadRequest("Current password is required to change username, email or password.")

    if changes.current_password and not verify_password(
        changes.current_password, admin.password_hash
    ):
        raise Unauthorized("Current password is incorrect.")

    fields: dict[str, str] = {}
    if changes.username is not None and changes.username != admin.username:
        repo.ensure_available("username", changes.username, exclude_id=admin.id)
        fields["username"] = changes.username
    if changes.email is not None and changes.email != admin.email:
        repo.ensure_available("email", changes.email, exclude_id=admin.id)
        fields["email"] = changes.email
    identity_changed = bool(fields)
    if changes.new_password is not None:
        fields["password_hash"] = hash_password(changes.new_password)

    if not fields:
        return ProfileUpdateResult(admin=admin)

    admin = repo.update(admin, **fields)
    logger.info(
        "Profile updated",
        extra={"admin_id": admin.id, "fields": ",".join(sorted(fields))},
    )
    token = issue_for(admin, config) if identity_changed else None
    return ProfileUpdateResult(admin=admin, token=token)
