"""Registry of named sync entries."""

import logging
from typing import Optional

from .config import Config
from .models import Entry

logger = logging.getLogger(__name__)


class EntryRegistry:
    """Name to (local path, remote path) mapping backed by a :class:`Config`."""

    def __init__(self, config: Config):
        self.config = config

    def resolve(self, name: str) -> Optional[Entry]:
        """Look up an entry by exact, case-sensitive name.

        Returns:
            The entry, or None if no entry has that name
        """
        for entry in self.all():
            if entry.name == name:
                return entry
        return None

    def all(self) -> list[Entry]:
        """Return a snapshot of every entry, in config document order.

        Malformed entries (not a ``local``/``remote`` mapping) are skipped
        with a warning.
        """
        entries = []
        for name, pair in self.config.get_entries().items():
            if not isinstance(pair, dict):
                logger.warning("entry[%s] error: expected local/remote mapping", name)
                continue
            entries.append(
                Entry(
                    name=name,
                    local_path=_as_text(pair.get("local")),
                    remote_path=_as_text(pair.get("remote")),
                )
            )
        return entries

    def upsert(self, entry: Entry) -> None:
        """Create or replace an entry and persist the config.

        Raises:
            ValueError: If the entry name is empty
            SmallSyncPersistenceError: If the config cannot be written
        """
        if not entry.name:
            raise ValueError("Entry name must not be empty")
        self.config.set_entry(entry.name, entry.local_path, entry.remote_path)
        self.config.save()
        logger.debug("Saved entry %s", entry.name)

    def __len__(self) -> int:
        return len(self.config.get_entries())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None


def _as_text(value: object) -> str:
    return "" if value is None else str(value)
