"""
Pydantic schemas for request and response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from codiro.utils import ensure_utc


class UserResponse(BaseModel):
    """User as seen by the frontend (camelCase keys)."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    username: str
    email: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)


class MeResponse(BaseModel):
    user: UserResponse


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
