"""
Reconciler - Refreshes a loaded folder against what is on disk now.
"""

import logging
from typing import TYPE_CHECKING, Optional, Set

from .errors import ConsistencyError
from .metadata import save_metadata
from .models import Group
from .walker import walk_folder

if TYPE_CHECKING:
    from .builder import GroupBuilder


class Reconciler:
    """
    Non destructive update of folder metadata.

    Pictures found on disk are added or refreshed, pictures no longer on
    disk are only flagged with existing=False: their curator metadata stays
    in the sidecar until someone removes it by hand. Sub folders that
    vanished are dropped from the display order, new ones are built.
    """

    def __init__(self, builder: 'GroupBuilder', logger: Optional[logging.Logger] = None):
        self.builder = builder
        self.logger = logger or logging.getLogger(__name__)

    def reconcile(self, group: Group, recursive: bool) -> None:
        """
        Reconcile a folder with disk and rewrite its sidecar.

        Args:
            group: Loaded folder to refresh in place
            recursive: Reconcile sub folders too, building new ones

        Raises:
            AlbumIOError: If the folder cannot be listed or written
            ConsistencyError: If a picture vanishes from the records while
                being registered
        """
        self.logger.debug(f"Reconciling {group.path}")
        for image in group.pictures.values():
            image.existing = False

        seen_dirs: Set[str] = set()
        for entry in walk_folder(group.path):
            self.builder.report_entry_error(entry)
            if entry.is_dir:
                seen_dirs.add(entry.name)
                if recursive:
                    self._reconcile_sub_group(group, entry.name, entry.path)
                continue
            if not entry.is_image:
                continue

            added = self.builder.add_image(group, entry.path)
            stored = group.get_image(entry.name)
            if stored is None or stored is not added or entry.name not in group.order:
                raise ConsistencyError(
                    f"consistency error, {entry.name!r} disappeared from the records of {group.path!r}"
                )
            stored.existing = True

        self._drop_vanished_sub_groups(group, seen_dirs)

        missing = [name for name in group.order if not group.pictures[name].existing]
        if missing:
            self.builder.stats.images_missing += len(missing)
            self.logger.info(f"{len(missing)} pictures of {group.path} are no longer on disk: {missing}")

        save_metadata(group)
        self.builder.stats.folders_updated += 1

    def _reconcile_sub_group(self, group: Group, name: str, path: str) -> None:
        child = group.get_sub_group(name)
        if child is None:
            self.logger.info(f"Found new sub folder {path}")
            self.builder.add_sub_group(group, path, recursive=True, update=True)
        else:
            self.reconcile(child, recursive=True)

    def _drop_vanished_sub_groups(self, group: Group, seen_dirs: Set[str]) -> None:
        for name in list(group.sub_group_order):
            if name in seen_dirs:
                continue
            self.logger.info(f"Sub folder {name} of {group.path} is gone, dropping it")
            group.sub_group_order.remove(name)
            group.sub_groups.pop(name, None)
