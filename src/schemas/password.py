"""Pydantic schemas for password note endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


def _require_text(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if not v:
        raise ValueError("Value cannot be empty")
    return v


class PasswordCreate(BaseModel):
    """Schema for adding a password note."""

    title: str
    password: str

    @field_validator("title", "password")
    @classmethod
    def check_not_blank(cls, v: str) -> str:
        """Title and password are required."""
        return _require_text(v)


class PasswordUpdate(BaseModel):
    """Schema for editing a password note."""

    title: str | None = None
    password: str | None = None

    @field_validator("title", "password")
    @classmethod
    def check_not_blank(cls, v: str | None) -> str | None:
        """Supplied values cannot be blank."""
        return _require_text(v)

    def changes(self) -> dict:
        """Fields explicitly supplied in the request, excluding nulls."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


class PasswordResponse(BaseModel):
    """
    Schema for password note responses.

    Passwords are stored and returned in plaintext; `masked` is the rendering
    the UI shows until the user reveals the value.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    password: str
    masked: str
    created_at: datetime


class PasswordListResponse(BaseModel):
    """Schema for password list responses."""

    items: list[PasswordResponse]
    total: int
