"""
Walker - Non recursive listing of a folder's entries.
"""

import os
from dataclasses import dataclass
from typing import Iterator, Optional

from .errors import AlbumIOError
from .models import is_image_file


@dataclass
class FolderEntry:
    """
    One entry of a folder listing.

    Attributes:
        path: Disk path of the entry
        name: Entry name inside the folder
        is_dir: True for sub folders (symlinks are followed)
        error: Error raised while inspecting the entry, if any
    """
    path: str
    name: str
    is_dir: bool
    error: Optional[OSError] = None

    @property
    def is_image(self) -> bool:
        return not self.is_dir and is_image_file(self.name)


def walk_folder(folder_path: str) -> Iterator[FolderEntry]:
    """
    Yield the entries of a folder sorted by name.

    Hidden entries (leading dot) are skipped, which also keeps temporary
    files written next to the sidecar out of the album. Every call lists the
    folder again, so the sequence can be restarted by calling it again.

    Raises:
        AlbumIOError: If the folder itself cannot be listed
    """
    try:
        with os.scandir(folder_path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise AlbumIOError(folder_path, "listing contents of", e)

    for entry in entries:
        if entry.name.startswith('.'):
            continue
        error = None
        try:
            is_dir = entry.is_dir()
        except OSError as e:
            is_dir = False
            error = e
        yield FolderEntry(path=entry.path, name=entry.name, is_dir=is_dir, error=error)
