"""Pydantic schemas for category and collection endpoints."""
from pydantic import BaseModel, field_validator

from schemas.bookmark import validate_name


class NameCreate(BaseModel):
    """Schema for adding a category or collection."""

    name: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Trim and require the name."""
        return validate_name(v)


class NameListResponse(BaseModel):
    """Names in display order."""

    names: list[str]


class CollectionSummary(BaseModel):
    """A collection with the number of bookmarks shown in it."""

    name: str
    count: int
    is_default: bool


class CollectionListResponse(BaseModel):
    """Schema for the collection index."""

    items: list[CollectionSummary]
