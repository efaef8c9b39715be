"""
In-memory entity stores for the running session.

Entities are immutable; every mutation builds a new entity and a new ordered
sequence and swaps it in whole. Stores never talk to the remote mirror, the
workspace does that after the local mutation has been applied.
"""
import time
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from models.bookmark import DEFAULT_COLLECTION
from services.exceptions import InvalidReorderError
from services.preview_service import extract_domain, truncate_words
from services.video import VideoProvider, classify_video_url

DEFAULT_CATEGORIES = ("YouTube", "Twitter", "Instagram", "LinkedIn")
MASK_CHARACTER = "•"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampIdGenerator:
    """
    Local id source: milliseconds since the epoch, as a string.

    Ids are bumped past the previous one when two are requested within the
    same millisecond, so they are unique and strictly increasing.
    """

    def __init__(self, clock_ns: Callable[[], int] = time.time_ns) -> None:
        self._clock_ns = clock_ns
        self._last = 0

    def __call__(self) -> str:
        now_ms = self._clock_ns() // 1_000_000
        self._last = max(now_ms, self._last + 1)
        return str(self._last)


@dataclass(frozen=True)
class BookmarkDraft:
    """User-supplied fields of a bookmark about to be added."""

    title: str
    description: str
    image: str
    url: str
    category: str
    collection: str = DEFAULT_COLLECTION
    is_favorite: bool = False
    is_archived: bool = False


@dataclass(frozen=True)
class Bookmark:
    """A saved link or uploaded image."""

    id: str
    title: str
    description: str
    image: str
    domain: str
    url: str
    category: str
    collection: str = DEFAULT_COLLECTION
    is_favorite: bool = False
    is_archived: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    is_video: bool = False
    video_provider: VideoProvider | None = None
    video_id: str | None = None


@dataclass(frozen=True)
class PasswordEntry:
    """A plaintext password note."""

    id: str
    title: str
    password: str
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def masked(self) -> str:
        """The password with every character replaced by a bullet."""
        return MASK_CHARACTER * len(self.password)


EntityT = TypeVar("EntityT", Bookmark, PasswordEntry)


class _EntityStore(Generic[EntityT]):
    """Ordered, most-recent-first sequence of entities keyed by id."""

    immutable_fields = frozenset({"id", "created_at"})
    updatable_fields: frozenset[str] = frozenset()

    def __init__(
        self,
        items: Iterable[EntityT] = (),
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._items: tuple[EntityT, ...] = tuple(items)
        self._next_id = id_factory or TimestampIdGenerator()

    @property
    def items(self) -> tuple[EntityT, ...]:
        """Current sequence (most recent first unless reordered)."""
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[EntityT]:
        return iter(self._items)

    def get(self, entity_id: str) -> EntityT | None:
        """Return the entity with this id, or None."""
        for item in self._items:
            if item.id == entity_id:
                return item
        return None

    def delete(self, entity_id: str) -> bool:
        """Remove the entity with this id. Returns False (no-op) if there is none."""
        remaining = tuple(item for item in self._items if item.id != entity_id)
        if len(remaining) == len(self._items):
            return False
        self._items = remaining
        return True

    def _new_id(self, entity_id: str | None) -> str:
        if entity_id is None:
            return self._next_id()
        if self.get(entity_id) is not None:
            raise ValueError(f"Duplicate id: {entity_id}")
        return entity_id

    def _prepend(self, entity: EntityT) -> EntityT:
        self._items = (entity, *self._items)
        return entity

    def _swap(self, updated: EntityT) -> EntityT:
        self._items = tuple(updated if item.id == updated.id else item for item in self._items)
        return updated

    def _check_changes(self, changes: Mapping[str, Any]) -> None:
        immutable = self.immutable_fields & changes.keys()
        if immutable:
            raise ValueError(f"Fields cannot be changed: {sorted(immutable)}")
        unknown = changes.keys() - self.updatable_fields
        if unknown:
            raise ValueError(f"Unknown fields: {sorted(unknown)}")


class BookmarkStore(_EntityStore[Bookmark]):
    """In-memory bookmarks for the session."""

    updatable_fields = frozenset({
        "title", "description", "image", "url", "category", "collection",
        "is_favorite", "is_archived",
    })

    def add(
        self,
        draft: BookmarkDraft,
        bookmark_id: str | None = None,
        created_at: datetime | None = None,
    ) -> Bookmark:
        """
        Create a bookmark from a draft and prepend it.

        Assigns the id (a store-assigned key when given, else a local
        timestamp id) and the creation time. The domain and video
        classification are derived from the URL; the description is truncated.
        """
        bookmark = Bookmark(
            id=self._new_id(bookmark_id),
            title=draft.title,
            description=truncate_words(draft.description),
            image=draft.image,
            url=draft.url,
            category=draft.category,
            collection=draft.collection or DEFAULT_COLLECTION,
            is_favorite=draft.is_favorite,
            is_archived=draft.is_archived,
            created_at=created_at or _utcnow(),
            **_url_derived_fields(draft.url),
        )
        return self._prepend(bookmark)

    def update(self, bookmark_id: str, changes: Mapping[str, Any]) -> Bookmark | None:
        """
        Replace only the supplied fields of a bookmark.

        Returns the updated bookmark, or None (no-op) when no bookmark matches.

        Raises:
            ValueError: If changes name an unknown or immutable field.
        """
        self._check_changes(changes)
        current = self.get(bookmark_id)
        if current is None:
            return None
        values = dict(changes)
        if "description" in values:
            values["description"] = truncate_words(values["description"])
        if "collection" in values and not values["collection"]:
            values["collection"] = DEFAULT_COLLECTION
        if "url" in values and values["url"] != current.url:
            values.update(_url_derived_fields(values["url"]))
        return self._swap(replace(current, **values))

    def reorder(self, bookmark_ids: Sequence[str]) -> tuple[Bookmark, ...]:
        """
        Replace the sequence with the same bookmarks in a new order.

        Raises:
            InvalidReorderError: If bookmark_ids is not a permutation of the
                current ids. The sequence is left unchanged.
        """
        by_id = {bookmark.id: bookmark for bookmark in self._items}
        requested = set(bookmark_ids)
        duplicated = len(requested) != len(bookmark_ids)
        missing = by_id.keys() - requested
        unexpected = requested - by_id.keys()
        if duplicated or missing or unexpected:
            raise InvalidReorderError(missing, unexpected, duplicated)
        self._items = tuple(by_id[bookmark_id] for bookmark_id in bookmark_ids)
        return self._items

    def move(self, bookmark_id: str, before_id: str) -> bool:
        """
        Move one bookmark to the position currently held by another.

        Mirrors a drag-and-drop: the dragged bookmark is removed, then inserted
        at the target's original index. Returns False if either id is unknown
        or both are the same.
        """
        ids = [bookmark.id for bookmark in self._items]
        if bookmark_id == before_id or bookmark_id not in ids or before_id not in ids:
            return False
        source = ids.index(bookmark_id)
        target = ids.index(before_id)
        items = list(self._items)
        dragged = items.pop(source)
        items.insert(target, dragged)
        self._items = tuple(items)
        return True

    def replace_all(self, bookmarks: Iterable[Bookmark]) -> None:
        """Replace the whole sequence (used for the initial remote load)."""
        self._items = tuple(bookmarks)

    def in_collection(self, name: str) -> tuple[Bookmark, ...]:
        """All bookmarks in a collection, archived included."""
        return tuple(bookmark for bookmark in self._items if bookmark.collection == name)


class PasswordStore(_EntityStore[PasswordEntry]):
    """In-memory password notes for the session."""

    updatable_fields = frozenset({"title", "password"})

    def add(self, title: str, password: str, password_id: str | None = None) -> PasswordEntry:
        """
        Create a password entry and prepend it.

        Raises:
            ValueError: If title or password is blank.
        """
        entry = PasswordEntry(
            id=self._new_id(password_id),
            title=_require_text("title", title),
            password=_require_text("password", password),
        )
        return self._prepend(entry)

    def update(self, password_id: str, changes: Mapping[str, Any]) -> PasswordEntry | None:
        """Replace the supplied fields; None (no-op) when no entry matches."""
        self._check_changes(changes)
        current = self.get(password_id)
        if current is None:
            return None
        values = {key: _require_text(key, value) for key, value in changes.items()}
        return self._swap(replace(current, **values))


class NameSet:
    """
    Ordered set of unique names (categories or collections).

    Names are trimmed and compared case-sensitively. Protected names can never
    be removed.
    """

    def __init__(self, names: Iterable[str] = (), protected: Iterable[str] = ()) -> None:
        self._protected = frozenset(protected)
        self._names: tuple[str, ...] = ()
        for name in (*self._protected, *names):
            self.add(name)

    @property
    def names(self) -> tuple[str, ...]:
        """Names in insertion order."""
        return self._names

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def add(self, name: str) -> bool:
        """
        Add a name. Returns False (no-op) if it is already present.

        Raises:
            ValueError: If the name is blank.
        """
        name = _require_text("name", name)
        if name in self._names:
            return False
        self._names = (*self._names, name)
        return True

    def remove(self, name: str) -> bool:
        """Remove a name. Returns False for protected or unknown names."""
        if name in self._protected or name not in self._names:
            return False
        self._names = tuple(existing for existing in self._names if existing != name)
        return True


def _require_text(field_name: str, value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} cannot be empty")
    return value


def _url_derived_fields(url: str) -> dict[str, Any]:
    if not url:
        return {"domain": "", "is_video": False, "video_provider": None, "video_id": None}
    video = classify_video_url(url)
    return {
        "domain": extract_domain(url),
        "is_video": video.is_video,
        "video_provider": video.provider,
        "video_id": video.video_id,
    }
