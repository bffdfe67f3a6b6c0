"""Health check response schema."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"]
    auth_configured: bool = Field(
        description="False when JWT_SECRET is unset; logins fail until it is configured",
    )
