"""
AlbumConfig - Configuration for building and serving an album.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .models import ThumbSize, DEFAULT_THUMB_SIZE


def str2bool(value: Optional[str], default: bool = False) -> bool:
    """Convert common environment strings into a boolean."""
    if value is None:
        return default
    value = value.strip().lower()
    if value in {'yes', 'true', 't', 'y', '1'}:
        return True
    if value in {'no', 'false', 'f', 'n', '0'}:
        return False
    return default


@dataclass
class AlbumConfig:
    """
    Configuration for an album.

    Built once (from the environment, then overridden by CLI arguments) and
    handed explicitly to the builder, the thumbnail cache and the server.

    Attributes:
        album_path: Root folder of the album on disk
        theme_path: Folder holding the theme templates and static files
        theme_name: Name written to the theme config when scaffolding
        host: Interface the HTTP server binds to
        port: Port the HTTP server listens on
        server: Bottle server adapter name
        recursive: Whether sub folders are part of the album
        default_thumb_size: Thumbnail size used when no folder defines any
        pregenerate_thumbnails: Generate thumbnails when images are first added
        thumbnail_quality: JPEG quality for generated thumbnails
        debug: Run Bottle in debug mode
    """
    album_path: str = ''
    theme_path: Optional[str] = None
    theme_name: str = 'default'
    host: str = '0.0.0.0'
    port: int = 8080
    server: str = 'wsgiref'
    recursive: bool = True
    default_thumb_size: ThumbSize = field(default_factory=lambda: DEFAULT_THUMB_SIZE)
    pregenerate_thumbnails: bool = True
    thumbnail_quality: int = 85
    debug: bool = False

    @classmethod
    def from_env(cls) -> 'AlbumConfig':
        """Create configuration from GALLERY_* environment variables."""
        default_size = DEFAULT_THUMB_SIZE
        width = os.getenv('GALLERY_THUMB_WIDTH')
        height = os.getenv('GALLERY_THUMB_HEIGHT')
        if width and height:
            default_size = ThumbSize(width=int(width), height=int(height))

        return cls(
            album_path=os.getenv('GALLERY_ALBUM_PATH', ''),
            theme_path=os.getenv('GALLERY_THEME_PATH') or None,
            theme_name=os.getenv('GALLERY_THEME_NAME', 'default'),
            host=os.getenv('GALLERY_HOST', '0.0.0.0'),
            port=int(os.getenv('GALLERY_PORT', '8080')),
            server=os.getenv('GALLERY_SERVER', 'wsgiref'),
            recursive=str2bool(os.getenv('GALLERY_RECURSIVE'), default=True),
            default_thumb_size=default_size,
            pregenerate_thumbnails=str2bool(os.getenv('GALLERY_PREGENERATE'), default=True),
            thumbnail_quality=int(os.getenv('GALLERY_THUMB_QUALITY', '85')),
            debug=str2bool(os.getenv('GALLERY_DEBUG')),
        )

    def validate(self) -> List[str]:
        """
        Check the configuration.

        Returns:
            List of error messages, empty when the configuration is usable
        """
        errors = []
        if not self.album_path:
            errors.append("Album path is required")
        elif not os.path.isdir(self.album_path):
            errors.append(f"Album path is not a directory: {self.album_path}")

        if self.theme_path and not os.path.isdir(self.theme_path):
            errors.append(f"Theme path is not a directory: {self.theme_path}")

        if not 0 < self.port < 65536:
            errors.append(f"Port out of range: {self.port}")

        if self.default_thumb_size.width <= 0 or self.default_thumb_size.height <= 0:
            errors.append(f"Invalid default thumbnail size: {self.default_thumb_size}")

        if not 1 <= self.thumbnail_quality <= 100:
            errors.append(f"Thumbnail quality must be within 1-100: {self.thumbnail_quality}")

        return errors
