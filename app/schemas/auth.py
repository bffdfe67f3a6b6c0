"""Request/response schemas for auth and profile endpoints."""

import re

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

# At least one upper, one lower, one digit and one special character from the allowed set.
STRONG_PASSWORD_RE = re.compile(
    r"^(?=.*[A-Z])(?=.*[a-z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]+$"
)
USERNAME_RE = re.compile(r"^[a-zA-Z0-9_.]+$")


def normalize_email(value: str | None) -> str | None:
    return value.strip().lower() if value is not None else None


def check_username(value: str | None) -> str | None:
    if value is not None and not USERNAME_RE.match(value):
        raise ValueError("Username may only contain letters, digits, underscore and dot")
    return value


class LoginRequest(BaseModel):
    """Credentials for login. identifier is the email or username, per AUTH_LABEL_FIELD."""

    identifier: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("identifier")
    @classmethod
    def strip_identifier(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Identifier is required")
        return v


class LoginResponse(BaseModel):
    """JWT returned after successful login, with the caller's role."""

    model_config = ConfigDict(populate_by_name=True)

    token: str
    user_type: str = Field(..., alias="userType")


class AdminOut(BaseModel):
    """Administrator as exposed over the API (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str


class ProfileUpdateRequest(BaseModel):
    """Partial self-service update. currentPassword is required when anything changes."""

    model_config = ConfigDict(populate_by_name=True)

    # "label" is accepted as a synonym for username.
    username: str | None = Field(
        default=None,
        validation_alias=AliasChoices("username", "label"),
        min_length=3,
        max_length=50,
    )
    email: EmailStr | None = None
    new_password: str | None = Field(
        default=None, alias="newPassword", min_length=8, max_length=128
    )
    current_password: str | None = Field(
        default=None, alias="currentPassword", max_length=128
    )

    @field_validator("username")
    @classmethod
    def valid_username(cls, v: str | None) -> str | None:
        return check_username(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return normalize_email(v)

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, v: str | None) -> str | None:
        if v is not None and not STRONG_PASSWORD_RE.match(v):
            raise ValueError(
                "Password must contain upper and lower case letters, digits and special characters"
            )
        return v


class ProfileUpdateResponse(BaseModel):
    """Result of a profile update; token is present only when identity claims changed."""

    message: str
    admin: AdminOut
    token: str | None = None


class AuthContext(BaseModel):
    """Authenticated caller attached to the request by the auth guards."""

    id: int
    label: str
    email: str | None = None
    role: str
