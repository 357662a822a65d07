"""
LiveTree - Publishes the album tree to request handlers.
"""

import logging
import threading
from typing import Optional

from .builder import GroupBuilder
from .models import Group


class LiveTree:
    """
    Holder of the album tree being served.

    The published tree is never modified. A reload builds a complete new
    tree from disk and then swaps it in, so a request that grabbed the root
    keeps working on a consistent tree until it finishes.
    """

    def __init__(
        self,
        builder: GroupBuilder,
        root: Optional[Group] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.builder = builder
        self.logger = logger or logging.getLogger(__name__)
        self._root = root
        self._publish_lock = threading.Lock()
        self._reload_lock = threading.Lock()

    @property
    def root(self) -> Group:
        """The tree currently being served."""
        root = self._root
        if root is None:
            raise RuntimeError("album tree has not been loaded")
        return root

    @property
    def loaded(self) -> bool:
        return self._root is not None

    def publish(self, root: Group) -> None:
        with self._publish_lock:
            self._root = root

    def load(self) -> Group:
        """Load the album without reconciling existing sidecars and publish it."""
        with self._reload_lock:
            root = self.builder.load_album(update=False)
            self.publish(root)
        return root

    def reload(self) -> Group:
        """Rebuild the album reconciled with disk and swap it in."""
        with self._reload_lock:
            self.logger.info("Reloading album tree")
            root = self.builder.load_album(update=True)
            self.publish(root)
            self.logger.info("Album tree reloaded")
        return root
