"""Durable build cache backed by a single JSON file.

The whole mapping (cache key -> entry) is read on every lookup and rewritten
on every write. Entries are never evicted; volume is bounded by the distinct
champion/role/roster combinations actually requested.

An unreadable or corrupt file is treated as an empty cache so a bad file
never blocks generation. Write failures propagate.
"""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from draft_coach.models.cache import CacheEntry

logger = logging.getLogger(__name__)


class BuildCache:
    """Key -> CacheEntry store persisted as one JSON document."""

    def __init__(self, path: str | Path, clock: Callable[[], float] = time.time):
        """Initialize the cache.

        Args:
            path: JSON file holding the cache (created on first write)
            clock: Returns the current time in seconds; stamps new entries
        """
        self.path = Path(path).expanduser()
        self._clock = clock
        self._lock = threading.Lock()

    def _read_all(self) -> dict[str, CacheEntry]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Build cache unreadable at {self.path}, treating as empty: {e}")
            return {}
        if not isinstance(raw, dict):
            logger.warning(f"Build cache at {self.path} is not a mapping, treating as empty")
            return {}

        entries: dict[str, CacheEntry] = {}
        for key, value in raw.items():
            try:
                entries[key] = CacheEntry.from_dict(value)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed cache entry {key!r}: {e}")
        return entries

    def _write_all(self, entries: dict[str, CacheEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {key: entry.to_dict() for key, entry in entries.items()}
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for a key (fresh or stale), or None."""
        return self._read_all().get(key)

    def set(self, key: str, text: str, patch_detected: str) -> CacheEntry:
        """Create or overwrite the entry for a key, stamped now."""
        entry = CacheEntry(
            key=key,
            created_at=self._clock(),
            text=text,
            patch_detected=patch_detected,
            origin="grounded",
        )
        with self._lock:
            entries = self._read_all()
            entries[key] = entry
            self._write_all(entries)
        logger.info(f"Cached build for {key}")
        return entry

    def __len__(self) -> int:
        return len(self._read_all())
