"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from core.config import get_settings
from models.bookmark import DEFAULT_COLLECTION
from services.preview_service import normalize_url
from services.video import VideoClassification, VideoProvider, embed_url

BookmarkView = Literal["home", "favorites", "archived"]


def validate_title_length(title: str | None) -> str | None:
    """Validate that title doesn't exceed maximum length."""
    settings = get_settings()
    if title is not None and len(title) > settings.max_title_length:
        raise ValueError(
            f"Title exceeds maximum length of {settings.max_title_length:,} characters "
            f"(got {len(title):,} characters).",
        )
    return title


def validate_description_length(description: str | None) -> str | None:
    """Validate that description doesn't exceed maximum length."""
    settings = get_settings()
    if description is not None and len(description) > settings.max_description_length:
        max_len = settings.max_description_length
        raise ValueError(
            f"Description exceeds maximum length of {max_len:,} characters "
            f"(got {len(description):,} characters).",
        )
    return description


def validate_name(name: str | None) -> str | None:
    """Trim a category/collection name and reject blank ones."""
    if name is None:
        return None
    name = name.strip()
    if not name:
        raise ValueError("Name cannot be empty")
    return name


class BookmarkCreate(BaseModel):
    """Schema for saving a previewed link as a bookmark."""

    url: str = Field(min_length=1)
    title: str
    description: str = ""
    image: str = ""
    category: str
    collection: str = DEFAULT_COLLECTION
    is_favorite: bool = False
    is_archived: bool = False

    @field_validator("url")
    @classmethod
    def normalize(cls, v: str) -> str:
        """Add https:// when no scheme was given."""
        if not v.strip():
            raise ValueError("URL cannot be empty")
        return normalize_url(v)

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str) -> str:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str) -> str:
        """Validate description length."""
        return validate_description_length(v)

    @field_validator("category", "collection")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Trim and require category/collection names."""
        return validate_name(v)


class BookmarkUpdate(BaseModel):
    """
    Schema for partially updating a bookmark.

    Only fields present in the request body are changed.
    """

    title: str | None = None
    description: str | None = None
    url: str | None = None
    image: str | None = None
    category: str | None = None
    collection: str | None = None
    is_favorite: bool | None = None
    is_archived: bool | None = None

    @field_validator("url")
    @classmethod
    def normalize(cls, v: str | None) -> str | None:
        """Add https:// when no scheme was given; '' clears the URL."""
        if v is None or not v.strip():
            return "" if v is not None else None
        return normalize_url(v)

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)

    @field_validator("category", "collection")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        """Trim and require category/collection names."""
        return validate_name(v)

    def changes(self) -> dict:
        """Fields explicitly supplied in the request, excluding nulls."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


class BookmarkResponse(BaseModel):
    """Schema for bookmark responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    image: str
    domain: str
    url: str
    category: str
    collection: str
    is_favorite: bool
    is_archived: bool
    created_at: datetime
    is_video: bool = False
    video_provider: VideoProvider | None = None
    video_id: str | None = None

    @computed_field
    @property
    def embed_url(self) -> str | None:
        """Player URL for video bookmarks."""
        return embed_url(
            self.url,
            VideoClassification(self.is_video, self.video_provider, self.video_id),
        )


class BookmarkListResponse(BaseModel):
    """Schema for bookmark list responses."""

    items: list[BookmarkResponse]
    total: int


class BookmarkOrder(BaseModel):
    """Every bookmark id, in the new order."""

    ids: list[str]


class BookmarkMove(BaseModel):
    """Drop target for a drag-and-drop move."""

    before_id: str


class CollectionAssignment(BaseModel):
    """Move a selection of bookmarks into a (possibly new) collection."""

    bookmark_ids: list[str] = Field(min_length=1)
    collection: str

    @field_validator("collection")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Trim and require the collection name."""
        return validate_name(v)


class LinkPreviewResponse(BaseModel):
    """Schema for URL preview (before saving a bookmark)."""

    model_config = ConfigDict(from_attributes=True)

    title: str
    description: str
    image: str
    url: str
    domain: str
    is_video: bool = False
    video_provider: VideoProvider | None = None
    video_id: str | None = None
