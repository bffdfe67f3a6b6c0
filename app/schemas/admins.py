"""Request/response schemas for Owner-only administrator management."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.auth import AdminOut, check_username, normalize_email


class AdminCreateRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=50)

    @field_validator("username")
    @classmethod
    def valid_username(cls, v: str | None) -> str | None:
        return check_username(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return normalize_email(v)


class AdminUpdateRequest(BaseModel):
    """Owner edit of another administrator; at least one field must be supplied."""

    username: str | None = Field(default=None, min_length=3, max_length=50)
    email: EmailStr | None = None

    @field_validator("username")
    @classmethod
    def valid_username(cls, v: str | None) -> str | None:
        return check_username(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return normalize_email(v)


class AdminMutationResponse(BaseModel):
    message: str
    admin: AdminOut


class MessageResponse(BaseModel):
    message: str
