"""Blob storage for uploaded bookmark images."""
import base64
import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import aiofiles.os

from services.exceptions import ImageUploadError

logger = logging.getLogger(__name__)

IMAGE_PREFIX = "images"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@dataclass(frozen=True)
class ImageUpload:
    """An image file selected by the user in the add flow."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    def to_data_uri(self) -> str:
        """Embed the image inline, for sessions without blob storage."""
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


def sanitize_filename(filename: str) -> str:
    """
    Make a filename safe for use in a blob key.

    Drops any directory part and replaces characters outside
    [A-Za-z0-9._-] with underscores. Empty results become 'image'.
    """
    name = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).lstrip(".")
    return name or "image"


def build_image_key(filename: str, timestamp_ms: int) -> str:
    """Blob key for an uploaded image: images/{timestamp}_{sanitized filename}."""
    return f"{IMAGE_PREFIX}/{timestamp_ms}_{sanitize_filename(filename)}"


class BlobStorage:
    """
    Filesystem-backed blob store.

    Blobs are written under `root` by key and resolved to public URLs under
    `public_base_url`, which the API serves as static files.
    """

    def __init__(
        self,
        root: str | Path,
        public_base_url: str,
        clock_ms: Callable[[], int] = lambda: time.time_ns() // 1_000_000,
    ) -> None:
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")
        self._clock_ms = clock_ms

    def public_url(self, key: str) -> str:
        """Derive the publicly resolvable download URL for a key."""
        return f"{self.public_base_url}/{key}"

    async def upload_image(self, image: ImageUpload) -> str:
        """
        Store an image and return its public URL.

        Raises:
            ImageUploadError: If the blob cannot be written.
        """
        timestamp_ms = self._clock_ms()
        try:
            await aiofiles.os.makedirs(self.root / IMAGE_PREFIX, exist_ok=True)
            while True:
                key = build_image_key(image.filename, timestamp_ms)
                path = self.root / key
                try:
                    # Exclusive create: never overwrite an earlier upload
                    async with aiofiles.open(path, "xb") as f:
                        await f.write(image.content)
                    break
                except FileExistsError:
                    timestamp_ms += 1
        except OSError as e:
            logger.error("Image upload failed for %s: %s", image.filename, e)
            raise ImageUploadError(image.filename, str(e)) from e
        logger.info("Uploaded image %s as %s", image.filename, key)
        return self.public_url(key)
