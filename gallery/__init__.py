"""
Folder backed photo album.

A directory tree of pictures becomes a browsable album:
    1. Build: each folder gets a metadata.json sidecar curators can edit
    2. Update: sidecars are reconciled with what is on disk, never losing edits
    3. Serve: folders, pictures and cached thumbnails are served over HTTP
"""

__version__ = "1.0.0"

from .errors import (
    GalleryError,
    AlbumIOError,
    MetadataFormatError,
    ThumbnailDecodeError,
    ConsistencyError,
    ThemeError,
)
from .config import AlbumConfig
from .models import Group, ImageItem, ThumbSize
from .metadata import read_metadata, write_metadata
from .thumbnails import ThumbnailGenerator, ThumbnailCache
from .builder import BuildStats, GroupBuilder
from .reconciler import Reconciler
from .resolver import Resolution, ResolutionKind, resolve
from .views import FolderPage, ImagePage
from .live_tree import LiveTree
from .theme import Theme

__all__ = [
    "GalleryError",
    "AlbumIOError",
    "MetadataFormatError",
    "ThumbnailDecodeError",
    "ConsistencyError",
    "ThemeError",
    "AlbumConfig",
    "Group",
    "ImageItem",
    "ThumbSize",
    "read_metadata",
    "write_metadata",
    "ThumbnailGenerator",
    "ThumbnailCache",
    "BuildStats",
    "GroupBuilder",
    "Reconciler",
    "Resolution",
    "ResolutionKind",
    "resolve",
    "FolderPage",
    "ImagePage",
    "LiveTree",
    "Theme",
]
