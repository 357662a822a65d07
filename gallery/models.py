"""
Models - Folder (Group) and picture (ImageItem) nodes of an album tree.
"""

import os
import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# Name of the sidecar file holding a folder's metadata.
METADATA_FILE_NAME = 'metadata.json'

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.tiff', '.gif')


def is_image_file(file_name: str) -> bool:
    """Return True if the file name carries one of the known image extensions."""
    if file_name == METADATA_FILE_NAME:
        return False
    lower = file_name.lower()
    if lower.endswith('.json'):
        return False
    return lower.endswith(IMAGE_EXTENSIONS)


@dataclass(frozen=True)
class ThumbSize:
    """
    Bounding box of a thumbnail.

    Attributes:
        width: Maximum width in pixels
        height: Maximum height in pixels
    """
    width: int
    height: int

    def to_dict(self) -> dict:
        return {'width': self.width, 'height': self.height}

    @classmethod
    def from_dict(cls, data: dict) -> 'ThumbSize':
        return cls(width=int(data['width']), height=int(data['height']))

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


DEFAULT_THUMB_SIZE = ThumbSize(width=320, height=213)


@dataclass
class ImageItem:
    """
    Metadata for a single picture of a folder.

    Attributes:
        path: Disk path of the picture
        file_name: File name of the picture inside its folder
        title: Curator given title
        description: Curator given description
        visible: Whether the picture is displayed
        existing: Whether the file was present on the last walk of its folder
        accessible: Best guess on whether the file can be read
        parent: Group holding this picture (never serialized)
    """
    path: str
    file_name: str
    title: str = ''
    description: str = ''
    visible: bool = True
    existing: bool = True
    accessible: bool = True
    parent: Optional['Group'] = field(default=None, repr=False, compare=False)

    def relative_path(self) -> str:
        """Return the URL path of this picture relative to the album root."""
        if self.parent is None:
            return posixpath.join('/', self.file_name)
        return posixpath.join(self.parent.traverse_path(), self.file_name)

    def thumb_name(self, width: int, height: int) -> str:
        """Return the URL path of this picture's thumbnail at the given size."""
        return f"{self.relative_path()}_{width}_x_{height}"

    def file_system_thumb(self, width: int, height: int) -> str:
        """Return the disk path of this picture's thumbnail at the given size."""
        if self.parent is None:
            base = self.path
        else:
            base = os.path.join(self.parent.file_system_path(), self.file_name)
        return f"{base}_{width}_x_{height}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'path': self.path,
            'file-name': self.file_name,
            'title': self.title,
            'description': self.description,
            'visible': self.visible,
            'existing': self.existing,
            'accessible': self.accessible,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ImageItem':
        """Create from dictionary."""
        return cls(
            path=data.get('path', ''),
            file_name=data.get('file-name', ''),
            title=data.get('title', ''),
            description=data.get('description', ''),
            visible=data.get('visible', True),
            existing=data.get('existing', True),
            accessible=data.get('accessible', True),
        )


@dataclass
class Group:
    """
    A folder of the album, holding pictures and sub folders.

    Attributes:
        path: Disk path of the folder
        folder_name: Name of the folder, also its key in the parent
        title: Curator given title
        description: Curator given description
        pictures: Pictures of this folder keyed by file name
        order: Display order of the pictures
        sub_groups: Sub folders keyed by folder name (never serialized)
        sub_group_order: Display order of the sub folders
        allowed_thumb_sizes: Thumbnail sizes served for this folder, None
            until defined or inherited
        parent: Containing folder, None for the album root
    """
    path: str
    folder_name: str = ''
    title: str = ''
    description: str = ''
    pictures: Dict[str, ImageItem] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)
    sub_groups: Dict[str, 'Group'] = field(default_factory=dict, repr=False)
    sub_group_order: List[str] = field(default_factory=list)
    allowed_thumb_sizes: Optional[List[ThumbSize]] = None
    parent: Optional['Group'] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if not self.folder_name and self.path:
            self.folder_name = os.path.basename(os.path.normpath(self.path))

    @property
    def sidecar_path(self) -> str:
        """Disk path of this folder's metadata file."""
        return os.path.join(self.path, METADATA_FILE_NAME)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def has_sub_group(self, name: str) -> bool:
        return name in self.sub_groups

    def has_image(self, name: str) -> bool:
        return name in self.pictures

    def get_image(self, name: str) -> Optional[ImageItem]:
        return self.pictures.get(name)

    def get_sub_group(self, name: str) -> Optional['Group']:
        return self.sub_groups.get(name)

    def allows_thumb(self, width: int, height: int) -> bool:
        """Return True if width x height is one of this folder's thumbnail sizes."""
        return ThumbSize(width, height) in (self.allowed_thumb_sizes or [])

    def traverse_path(self) -> str:
        """Return the URL path of this folder relative to the album root."""
        if self.parent is None:
            return '/'
        return posixpath.join(self.parent.traverse_path(), self.folder_name)

    def file_system_path(self) -> str:
        """Return the absolute disk path of this folder."""
        if self.parent is None:
            return os.path.abspath(self.path)
        return os.path.join(self.parent.file_system_path(), self.folder_name)

    def ancestors(self) -> List['Group']:
        """Return the chain of folders from the album root down to this one."""
        chain = []
        node: Optional[Group] = self
        while node is not None:
            chain.append(node)
            node = node.parent
        chain.reverse()
        return chain

    def add_picture(self, image: ImageItem) -> bool:
        """
        Register a picture in this folder.

        Returns:
            True if the picture was new, False if one with that name existed
        """
        image.parent = self
        if image.file_name in self.pictures:
            return False
        self.pictures[image.file_name] = image
        self.order.append(image.file_name)
        return True

    def add_sub_group(self, group: 'Group') -> None:
        """Register a sub folder, appending it to the display order if unknown."""
        group.parent = self
        self.sub_groups[group.folder_name] = group
        if group.folder_name not in self.sub_group_order:
            self.sub_group_order.append(group.folder_name)

    def reattach(self) -> None:
        """Point every picture of this folder back at it."""
        for image in self.pictures.values():
            image.parent = self

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        sizes = None
        if self.allowed_thumb_sizes is not None:
            sizes = [size.to_dict() for size in self.allowed_thumb_sizes]
        return {
            'title': self.title,
            'description': self.description,
            'pictures': {
                name: image.to_dict()
                for name, image in self.pictures.items()
            },
            'order': list(self.order),
            'sub-group-order': list(self.sub_group_order),
            'allowed-thumb-sizes': sizes,
        }

    def update_from_dict(self, data: dict) -> None:
        """Overwrite the persisted fields of this folder from a dictionary."""
        self.title = data.get('title') or ''
        self.description = data.get('description') or ''

        self.pictures = {}
        for name, image_data in (data.get('pictures') or {}).items():
            image = ImageItem.from_dict(image_data)
            # The map key names the file.
            image.file_name = name
            self.pictures[name] = image

        # Order entries must point at known pictures, and known pictures
        # must all be ordered exactly once.
        self.order = []
        for name in data.get('order') or []:
            if name in self.pictures and name not in self.order:
                self.order.append(name)
        for name in self.pictures:
            if name not in self.order:
                self.order.append(name)

        self.sub_group_order = []
        for name in data.get('sub-group-order') or []:
            if name not in self.sub_group_order:
                self.sub_group_order.append(name)

        sizes = data.get('allowed-thumb-sizes')
        if sizes is None:
            self.allowed_thumb_sizes = None
        else:
            self.allowed_thumb_sizes = [ThumbSize.from_dict(s) for s in sizes]

        self.reattach()

    @classmethod
    def from_dict(cls, data: dict, path: str = '', parent: Optional['Group'] = None) -> 'Group':
        """Create from dictionary; path and parent are not part of the data."""
        group = cls(path=path, parent=parent)
        group.update_from_dict(data)
        return group
