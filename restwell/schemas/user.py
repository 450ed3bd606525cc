"""Pydantic schemas for user API payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class UserCreate(BaseModel):
    """Payload to create a user."""

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: str = Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")


class UserUpdate(BaseModel):
    """Payload to update mutable user fields."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    is_active: bool | None = None


class User(BaseModel):
    """User response payload."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    is_active: bool
    created_at: datetime


class UserListResponse(BaseModel):
    """List response envelope for users."""

    items: list[User]
