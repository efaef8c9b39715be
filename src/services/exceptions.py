"""Shared exceptions for service layer operations."""


class InvalidReorderError(Exception):
    """Raised when a new bookmark order is not a permutation of the existing bookmarks."""

    def __init__(self, missing: set[str], unexpected: set[str], duplicated: bool) -> None:
        self.missing = missing
        self.unexpected = unexpected
        self.duplicated = duplicated
        problems = []
        if missing:
            problems.append(f"missing ids: {sorted(missing)}")
        if unexpected:
            problems.append(f"unknown ids: {sorted(unexpected)}")
        if duplicated:
            problems.append("duplicate ids")
        super().__init__(
            "New order must contain every bookmark exactly once ("
            + "; ".join(problems) + ")",
        )


class ImageUploadError(Exception):
    """
    Raised when an image cannot be stored in blob storage.

    Aborts the whole add: the stored image URL is a prerequisite for the
    bookmark document, so nothing is committed locally or remotely.
    """

    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        self.reason = reason
        super().__init__(f"Failed to upload image '{filename}': {reason}")


class RemoteLoadError(Exception):
    """Raised when the initial load from the document store fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
