"""
GroupBuilder - Builds the album tree from folders on disk and their sidecars.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional

from .config import AlbumConfig
from .errors import ThumbnailDecodeError
from .metadata import load_metadata, save_metadata, sidecar_exists
from .models import Group, ImageItem, ThumbSize
from .reconciler import Reconciler
from .thumbnails import ThumbnailCache, ThumbnailGenerator
from .walker import FolderEntry, walk_folder


@dataclass
class BuildStats:
    """
    Statistics for a build or update pass.

    Attributes:
        folders_loaded: Folders whose sidecar was read
        folders_created: Folders built from disk for the first time
        folders_updated: Folders reconciled against disk
        images_added: Pictures seen for the first time
        images_missing: Known pictures not found on disk during reconciliation
        thumbnail_failures: Pictures whose thumbnails could not be generated
        start_time: Start timestamp
    """
    folders_loaded: int = 0
    folders_created: int = 0
    folders_updated: int = 0
    images_added: int = 0
    images_missing: int = 0
    thumbnail_failures: int = 0
    start_time: float = field(default_factory=time.time)

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time


class GroupBuilder:
    """
    Builds Group trees from disk.

    A folder with no sidecar is constructed from its contents and the
    sidecar is written. A folder with a sidecar is loaded from it, and
    optionally reconciled with what is on disk now.
    """

    def __init__(
        self,
        config: AlbumConfig,
        thumbnails: Optional[ThumbnailCache] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize builder.

        Args:
            config: Album configuration
            thumbnails: Thumbnail cache used to pregenerate thumbnails
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.thumbnails = thumbnails or ThumbnailCache(
            ThumbnailGenerator(config.thumbnail_quality, logger=self.logger),
            logger=self.logger,
        )
        self.reconciler = Reconciler(self, logger=self.logger)
        self.stats = BuildStats()

    def load_album(
        self,
        path: Optional[str] = None,
        update: bool = False,
        recursive: Optional[bool] = None
    ) -> Group:
        """
        Load the album root.

        Args:
            path: Album folder, defaults to the configured one
            update: Reconcile folders that already have a sidecar
            recursive: Include sub folders, defaults to the configured value

        Returns:
            The root Group
        """
        path = path or self.config.album_path
        if recursive is None:
            recursive = self.config.recursive
        self.stats = BuildStats()

        mode = "Updating" if update else "Loading"
        self.logger.info(f"{mode} album {path} (recursive={recursive})")
        root = self.load_group(
            path, [self.config.default_thumb_size], update=update, recursive=recursive
        )
        self.logger.info(
            f"Album ready: {self.stats.folders_loaded} loaded, "
            f"{self.stats.folders_created} created, {self.stats.folders_updated} updated, "
            f"{self.stats.images_added} new images ({self.stats.elapsed_seconds:.1f}s)"
        )
        return root

    def load_group(
        self,
        path: str,
        allowed_thumb_sizes: Optional[List[ThumbSize]],
        update: bool = False,
        recursive: bool = False,
        parent: Optional[Group] = None
    ) -> Group:
        """
        Load one folder, building its sidecar if it has none.

        Args:
            path: Folder path
            allowed_thumb_sizes: Sizes inherited from the parent, used when
                the sidecar defines none
            update: Reconcile the folder with disk if it already had a sidecar
            recursive: Build/reconcile sub folders too
            parent: Containing folder, None for the root

        Returns:
            The loaded Group

        Raises:
            AlbumIOError: If the folder or its sidecar cannot be accessed
            MetadataFormatError: If the sidecar is not valid metadata
        """
        group = Group(path=path, parent=parent)
        created = not sidecar_exists(path)

        if not created:
            load_metadata(group)
            self._derive_image_paths(group)
            self.stats.folders_loaded += 1

        if group.allowed_thumb_sizes is None and allowed_thumb_sizes is not None:
            group.allowed_thumb_sizes = list(allowed_thumb_sizes)

        if not created:
            self._load_known_sub_groups(group, recursive)

        if created:
            self.construct(group, recursive)
            save_metadata(group)
            self.stats.folders_created += 1
        elif update:
            self.reconciler.reconcile(group, recursive)

        return group

    @staticmethod
    def _derive_image_paths(group: Group) -> None:
        """Point pictures at their file in the folder as it is on disk now."""
        for name, image in group.pictures.items():
            image.path = os.path.join(group.path, name)

    def report_entry_error(self, entry: FolderEntry) -> None:
        """Warn about a listing entry that could not be inspected; it is still processed."""
        if entry.error is not None:
            self.logger.warning(f"Cannot inspect {entry.path}: {entry.error}")

    def _load_known_sub_groups(self, group: Group, recursive: bool) -> None:
        """Load the sub folders listed in a sidecar, forgetting vanished ones."""
        listed = group.sub_group_order
        group.sub_group_order = []
        for name in listed:
            child_path = os.path.join(group.path, name)
            if not os.path.isdir(child_path):
                self.logger.info(f"Sub folder {child_path} is gone, dropping it")
                continue
            self.add_sub_group(group, child_path, recursive=recursive, update=False)

    def construct(self, group: Group, recursive: bool) -> None:
        """
        Fill a folder's in-memory metadata from its contents on disk.

        Raises:
            AlbumIOError: If the folder cannot be listed, or a sub folder fails
        """
        for entry in walk_folder(group.path):
            self.report_entry_error(entry)
            if entry.is_dir:
                if recursive:
                    self.add_sub_group(group, entry.path, recursive=recursive, update=False)
                continue
            if entry.is_image:
                self.add_image(group, entry.path)

    def add_image(self, group: Group, path: str) -> ImageItem:
        """
        Register the picture at path in its folder.

        Unknown pictures get empty curator fields; known ones keep theirs.
        A picture that cannot be stat'ed is kept but marked inaccessible.

        Returns:
            The picture as stored in the folder
        """
        self.logger.debug(f"Considering file: {path}")
        accessible = True
        try:
            os.stat(path)
        except OSError as e:
            accessible = False
            self.logger.warning(f"Cannot access {path}, marking it inaccessible: {e}")

        file_name = os.path.basename(path)
        image = group.get_image(file_name)
        if image is None:
            image = ImageItem(path=path, file_name=file_name, accessible=accessible)
            group.add_picture(image)
            self.stats.images_added += 1
        else:
            image.parent = group
            image.path = path
            image.accessible = accessible

        if self.config.pregenerate_thumbnails and image.accessible:
            self.ensure_thumbnails(image)
        return image

    def ensure_thumbnails(self, image: ImageItem) -> None:
        """
        Generate a picture's thumbnails at every size its folder allows.

        Pictures that cannot be decoded are marked inaccessible and skipped;
        their thumbnails are attempted again when requested.
        """
        for size in image.parent.allowed_thumb_sizes or []:
            try:
                self.thumbnails.ensure(image, size.width, size.height)
            except ThumbnailDecodeError as e:
                image.accessible = False
                self.stats.thumbnail_failures += 1
                self.logger.warning(f"Skipping thumbnails for {image.path}: {e}")
                return

    def add_sub_group(
        self,
        group: Group,
        path: str,
        recursive: bool,
        update: bool
    ) -> Group:
        """Load the folder at path and register it as a sub folder of group."""
        child = self.load_group(
            path, group.allowed_thumb_sizes, update=update, recursive=recursive, parent=group
        )
        group.add_sub_group(child)
        return child
