"""
Views - Read only wrappers over the album tree for the templates.
"""

from typing import Dict, List, Optional

from .models import Group, ImageItem, ThumbSize


def displayable_images(group: Group) -> List[ImageItem]:
    """Pictures of a folder that are visible and present on disk, in display order."""
    images = []
    for name in group.order:
        image = group.pictures.get(name)
        if image is None:
            continue
        if image.visible and image.existing:
            images.append(image)
    return images


class FolderPage:
    """Template facing view of a folder."""

    def __init__(
        self,
        group: Group,
        metadata: Optional[Dict[str, str]] = None,
        current: bool = False
    ):
        self.group = group
        self.metadata = metadata or {}
        self.current = current

    @property
    def title(self) -> str:
        return self.group.title

    @property
    def description(self) -> str:
        return self.group.description

    @property
    def folder_name(self) -> str:
        return self.group.folder_name

    @property
    def display_title(self) -> str:
        return self.group.title or self.group.folder_name

    @property
    def traverse_path(self) -> str:
        return self.group.traverse_path()

    @property
    def thumb_size(self) -> Optional[ThumbSize]:
        """First thumbnail size allowed for this folder, used for listings."""
        sizes = self.group.allowed_thumb_sizes or []
        return sizes[0] if sizes else None

    @property
    def ancestors(self) -> List['FolderPage']:
        """Folders from the album root down to this one, inclusive."""
        return [
            FolderPage(node, self.metadata, current=node is self.group)
            for node in self.group.ancestors()
        ]

    @property
    def siblings(self) -> List['FolderPage']:
        """Folders next to this one, this one included and flagged current."""
        parent = self.group.parent
        if parent is None:
            return []
        pages = []
        for name in parent.sub_group_order:
            sibling = parent.sub_groups.get(name)
            if sibling is None:
                continue
            pages.append(FolderPage(sibling, self.metadata, current=sibling is self.group))
        return pages

    @property
    def children(self) -> List['FolderPage']:
        pages = []
        for name in self.group.sub_group_order:
            child = self.group.sub_groups.get(name)
            if child is not None:
                pages.append(FolderPage(child, self.metadata))
        return pages

    @property
    def images(self) -> List['ImagePage']:
        return [ImagePage(image, self.metadata) for image in displayable_images(self.group)]


class ImagePage:
    """
    Template facing view of a picture.

    Navigation (first, previous, next, last) runs over the visible pictures
    present on disk of the picture's folder.
    """

    def __init__(
        self,
        image: ImageItem,
        metadata: Optional[Dict[str, str]] = None,
        current: bool = False
    ):
        self.image = image
        self.metadata = metadata or {}
        self.current = current
        self._sequence: Optional[List[ImageItem]] = None

    @property
    def file_name(self) -> str:
        return self.image.file_name

    @property
    def title(self) -> str:
        return self.image.title

    @property
    def description(self) -> str:
        return self.image.description

    @property
    def display_title(self) -> str:
        return self.image.title or self.image.file_name

    @property
    def relative_path(self) -> str:
        return self.image.relative_path()

    @property
    def raw_path(self) -> str:
        return f"{self.image.relative_path()}?raw=true"

    def thumb_path(self, size: Optional[ThumbSize] = None) -> str:
        """URL of this picture's thumbnail, at the folder's first size by default."""
        if size is None:
            size = self.folder.thumb_size
        if size is None:
            return self.raw_path
        return self.image.thumb_name(size.width, size.height)

    @property
    def folder(self) -> FolderPage:
        return FolderPage(self.image.parent, self.metadata)

    @property
    def ancestors(self) -> List[FolderPage]:
        return self.folder.ancestors

    @property
    def children(self) -> List[FolderPage]:
        """Folders living next to this picture."""
        return self.folder.children

    def _images(self) -> List[ImageItem]:
        if self._sequence is None:
            self._sequence = displayable_images(self.image.parent)
        return self._sequence

    def _index(self) -> Optional[int]:
        for i, image in enumerate(self._images()):
            if image is self.image:
                return i
        return None

    def _page(self, image: ImageItem) -> 'ImagePage':
        return ImagePage(image, self.metadata, current=image is self.image)

    @property
    def siblings(self) -> List['ImagePage']:
        return [self._page(image) for image in self._images()]

    @property
    def first(self) -> Optional['ImagePage']:
        images = self._images()
        return self._page(images[0]) if images else None

    @property
    def last(self) -> Optional['ImagePage']:
        images = self._images()
        return self._page(images[-1]) if images else None

    @property
    def previous(self) -> Optional['ImagePage']:
        index = self._index()
        if index is None or index == 0:
            return None
        return self._page(self._images()[index - 1])

    @property
    def next(self) -> Optional['ImagePage']:
        index = self._index()
        images = self._images()
        if index is None or index >= len(images) - 1:
            return None
        return self._page(images[index + 1])
