"""In-memory gallery of generated entries.

The gallery is intentionally simple:

- entries live only for the lifetime of the process
- list order is reverse-chronological (newest first)
- ids are unique

All mutations come from the single request-handling context, so no locking
is needed.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator

from imaginarium.core.models import GeneratedEntry

logger = logging.getLogger(__name__)


class GalleryStore:
    """Newest-first collection of :class:`GeneratedEntry`."""

    def __init__(self) -> None:
        self._entries: deque[GeneratedEntry] = deque()

    def append(self, entry: GeneratedEntry) -> None:
        """Insert ``entry`` at the front of the gallery.

        Raises:
            ValueError: If an entry with the same id already exists
        """
        if self.get(entry.id) is not None:
            raise ValueError(f"Duplicate gallery entry id: {entry.id}")
        self._entries.appendleft(entry)
        logger.info("Gallery entry added: %s (%d total)", entry.id, len(self._entries))

    def remove(self, entry_id: str) -> bool:
        """Remove the entry with ``entry_id``.

        Removing an unknown id is a no-op.

        Returns:
            True if an entry was removed
        """
        kept = deque(entry for entry in self._entries if entry.id != entry_id)
        removed = len(kept) != len(self._entries)
        self._entries = kept
        if removed:
            logger.info("Gallery entry removed: %s", entry_id)
        return removed

    def get(self, entry_id: str) -> GeneratedEntry | None:
        return next((entry for entry in self._entries if entry.id == entry_id), None)

    def list_all(self) -> tuple[GeneratedEntry, ...]:
        """Return a read-only, newest-first view of all entries."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[GeneratedEntry]:
        return iter(self.list_all())
