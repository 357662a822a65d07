"""
Errors - Exceptions raised by the album tree, thumbnail cache and theme.
"""

from typing import Optional


class GalleryError(Exception):
    """Base class for every error raised by this package."""
    pass


class AlbumIOError(GalleryError):
    """
    Raised when a filesystem operation (stat, open, read, write) fails.

    Attributes:
        path: The path the failing operation was working on
    """

    def __init__(self, path: str, message: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        detail = f"{message} {path!r}"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)


class MetadataFormatError(GalleryError):
    """Raised when a sidecar file holds something other than a metadata JSON object."""

    def __init__(self, path: Optional[str], message: str):
        self.path = path
        where = f" in {path!r}" if path else ""
        super().__init__(f"malformed metadata{where}: {message}")


class ThumbnailDecodeError(GalleryError):
    """Raised when an image cannot be decoded to produce a thumbnail."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"cannot decode image {path!r}: {cause}")


class ConsistencyError(GalleryError):
    """
    Raised when reconciliation finds its own records broken.

    This is a logic bug, never an expected runtime condition, and must not
    be retried.
    """
    pass


class ThemeError(GalleryError):
    """Raised when a theme folder is missing, malformed or lacks a template."""
    pass
