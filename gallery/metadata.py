"""
Metadata - Reads and writes the per folder metadata sidecar.

The sidecar is a JSON object:

    {
        "title": "...",
        "description": "...",
        "pictures": {"a.jpg": {"path": ..., "file-name": ..., "title": ...,
                               "description": ..., "visible": true,
                               "existing": true, "accessible": true}},
        "order": ["a.jpg"],
        "sub-group-order": ["trip"],
        "allowed-thumb-sizes": [{"width": 320, "height": 213}]
    }

Disk path and parent links are not stored, they are derived at load time.
"""

import json
import logging
import os
import shutil
import tempfile
from typing import Optional, Union

from .errors import AlbumIOError, MetadataFormatError
from .models import Group, METADATA_FILE_NAME

logger = logging.getLogger(__name__)


def write_metadata(group: Group) -> bytes:
    """Serialize the persisted fields of a folder."""
    return json.dumps(group.to_dict(), indent=4, ensure_ascii=False).encode('utf-8')


def read_metadata(
    data: Union[bytes, str],
    group: Optional[Group] = None,
    source: Optional[str] = None
) -> Group:
    """
    Deserialize folder metadata.

    Args:
        data: Sidecar contents; empty input leaves the folder empty
        group: Folder to fill in, a new detached one is created if None
        source: Path the data came from, used in error messages

    Returns:
        The filled in folder, with every picture pointing back at it
    """
    if group is None:
        group = Group(path='')
    if isinstance(data, bytes):
        try:
            data = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MetadataFormatError(source, str(e))
    if not data.strip():
        return group

    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as e:
        raise MetadataFormatError(source, str(e))
    if not isinstance(parsed, dict):
        raise MetadataFormatError(source, f"expected an object, got {type(parsed).__name__}")

    try:
        group.update_from_dict(parsed)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise MetadataFormatError(source, f"unexpected structure: {e}")
    return group


def sidecar_exists(folder_path: str) -> bool:
    """
    Check whether a folder already carries a sidecar file.

    A missing sidecar means the folder was never built; it is created by the
    first save_metadata call.
    """
    sidecar = os.path.join(folder_path, METADATA_FILE_NAME)
    try:
        os.stat(sidecar)
    except FileNotFoundError:
        return False
    except OSError as e:
        raise AlbumIOError(sidecar, "checking metadata file existence", e)
    if not os.path.isfile(sidecar):
        raise AlbumIOError(sidecar, "metadata path is not a file")
    return True


def load_metadata(group: Group) -> Group:
    """Fill a folder from its sidecar file on disk."""
    sidecar = group.sidecar_path
    try:
        with open(sidecar, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise AlbumIOError(sidecar, "reading metadata file", e)
    return read_metadata(data, group, source=sidecar)


def save_metadata(group: Group) -> None:
    """Write a folder's metadata to its sidecar file, replacing the old one."""
    sidecar = group.sidecar_path
    serialized = write_metadata(group)
    logger.info(f"Writing metadata to {sidecar}")
    logger.debug(serialized.decode('utf-8'))

    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            'wb', dir=group.path, prefix='.metadata-', suffix='.tmp', delete=False
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(serialized)
            tmp.flush()
            os.fsync(tmp.fileno())
        shutil.move(tmp_path, sidecar)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise AlbumIOError(sidecar, "writing metadata file", e)
