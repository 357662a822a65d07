"""
Resolver - Maps request paths onto the album tree.

Resolution only walks the already built tree, it never looks at the disk.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .models import Group, ImageItem

# <image file name>_<width>_x_<height>
THUMB_PATTERN = re.compile(r'^(.+)_(\d+)_x_(\d+)$')


class ResolutionKind(Enum):
    FOLDER = 'folder'
    IMAGE_PAGE = 'image_page'
    RAW_IMAGE = 'raw_image'
    THUMBNAIL = 'thumbnail'
    FORBIDDEN = 'forbidden'
    NOT_FOUND = 'not_found'


@dataclass
class Resolution:
    """
    Outcome of resolving a request path.

    Attributes:
        kind: What the path points at
        group: Deepest folder reached while resolving
        image: Picture for image, raw and thumbnail outcomes
        width: Requested thumbnail width
        height: Requested thumbnail height
    """
    kind: ResolutionKind
    group: Group
    image: Optional[ImageItem] = None
    width: Optional[int] = None
    height: Optional[int] = None


def parse_thumb_name(component: str) -> Optional[Tuple[str, int, int]]:
    """
    Split a thumbnail name into its parts.

    Returns:
        (file_name, width, height), or None if component is not a thumbnail name
    """
    match = THUMB_PATTERN.match(component)
    if not match:
        return None
    file_name, width, height = match.groups()
    return file_name, int(width), int(height)


def split_path(path: str) -> List[str]:
    """Split a slash separated request path, ignoring empty segments."""
    return [segment for segment in path.split('/') if segment]


def resolve(root: Group, path: str, raw: bool = False) -> Resolution:
    """
    Resolve a request path against the album tree.

    Each component first names a sub folder, then a picture, then a
    thumbnail of a picture. Pictures and thumbnails only resolve as the last
    component.

    Args:
        root: Album root
        path: Request path, e.g. /trip/beach.jpg
        raw: The raw picture bytes were requested instead of its page

    Returns:
        Resolution describing what to serve
    """
    components = split_path(path)
    group = root
    if not components:
        return Resolution(ResolutionKind.FOLDER, group)

    last = len(components) - 1
    for i, component in enumerate(components):
        child = group.get_sub_group(component)
        if child is not None:
            group = child
            if i == last:
                return Resolution(ResolutionKind.FOLDER, group)
            continue

        if i != last:
            return Resolution(ResolutionKind.NOT_FOUND, group)

        image = group.get_image(component)
        if image is not None:
            kind = ResolutionKind.RAW_IMAGE if raw else ResolutionKind.IMAGE_PAGE
            return Resolution(kind, group, image=image)

        thumb = parse_thumb_name(component)
        if thumb is not None:
            file_name, width, height = thumb
            if not group.allows_thumb(width, height):
                return Resolution(ResolutionKind.FORBIDDEN, group, width=width, height=height)
            image = group.get_image(file_name)
            if image is None:
                return Resolution(ResolutionKind.NOT_FOUND, group)
            return Resolution(
                ResolutionKind.THUMBNAIL, group, image=image, width=width, height=height
            )

    return Resolution(ResolutionKind.NOT_FOUND, group)
