"""Directory producer: find repository roots and hand them to the workers.

Walks the tree depth-first in name order. A directory that directly contains
the marker directory (``.git`` by default) is emitted and its subtree is not
entered: the first match prunes, nested repositories below it are never
visited.
"""

import logging
import os
import threading
from typing import Callable, Iterator, List, Optional

from ..config import DEFAULT_MARKER
from .channel import HandoffChannel


logger = logging.getLogger(__name__)


class DirectoryProducer:
    """Emits one path per repository boundary found under root."""

    def __init__(
        self,
        root: str,
        marker: str = DEFAULT_MARKER,
        on_error: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the producer.

        Args:
            root: Directory to search
            marker: Name of the child directory that marks a repository root
            on_error: Receives one message per traversal error (default: log a warning)
        """
        self.root = root
        self.marker = marker
        self.on_error = on_error or logger.warning

    def discover(self) -> Iterator[str]:
        """Yield repository roots in traversal order."""
        if not os.path.isdir(self.root):
            if not os.path.exists(self.root):
                self.on_error(f'walk "{self.root}" failed with no such file or directory')
            else:
                logger.debug(f"Root is not a directory, nothing to walk: {self.root}")
            return

        stack = [self.root]
        while stack:
            path = stack.pop()
            subdirs = self._list_subdirs(path)
            if subdirs is None:
                continue
            if self.marker in subdirs:
                logger.debug(f"Found repository root: {path}")
                yield path
                continue
            # Reverse so the stack pops children in name order.
            stack.extend(os.path.join(path, name) for name in reversed(subdirs))

    def produce(self, channel: HandoffChannel[str], stop: Optional[threading.Event] = None) -> int:
        """
        Send every discovered root into channel, then close it.

        The walk ends early once stop is set.

        Returns:
            Number of roots sent
        """
        count = 0
        try:
            for path in self.discover():
                if stop is not None and stop.is_set():
                    logger.debug("Run stopped, ending walk early")
                    break
                channel.send(path)
                count += 1
        finally:
            channel.close()
        logger.debug(f"Walk finished, {count} repository root(s) found")
        return count

    def _list_subdirs(self, path: str) -> Optional[List[str]]:
        """Sorted names of real (non-symlink) subdirectories, or None on error."""
        try:
            with os.scandir(path) as entries:
                names = [entry.name for entry in entries if entry.is_dir(follow_symlinks=False)]
        except OSError as e:
            self.on_error(f'readdir "{path}" failed with {e.strerror or e}')
            return None
        names.sort()
        return names
