"""
Translation store - the process-wide translation cache.

Maps (source_text, language) to translated text. Reads and writes are
synchronous so `t()` can render straight from it. The store lives for the
whole process; it can optionally be snapshotted to a JSON file so a
restarted process does not start cold.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# Bump to invalidate every snapshot on disk
CACHE_VERSION = "v1"
DEFAULT_EXPIRY_DAYS = 7

_SECONDS_PER_DAY = 60 * 60 * 24


@dataclass
class CacheEntry:
    """A single cached translation."""

    source_text: str
    language: str
    translated_text: str
    cached_at: float = field(default_factory=time.time)

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_text, self.language)


class TranslationStore:
    """
    In-memory translation cache.

    Usage:
        store = TranslationStore()
        store.set("Email", "ur", "ای میل")
        store.get("Email", "ur")  # -> "ای میل"
        store.get("Email", "hi")  # -> None
    """

    def __init__(self):
        self._entries: dict[tuple[str, str], CacheEntry] = {}

    def get(self, source_text: str, language: str) -> str | None:
        """Get cached translation."""
        entry = self._entries.get((source_text, language))
        return entry.translated_text if entry else None

    def set(self, source_text: str, language: str, translated_text: str) -> None:
        """Cache a translation, replacing any earlier one for the same key."""
        entry = CacheEntry(source_text, language, translated_text)
        self._entries[entry.key] = entry

    def has(self, source_text: str, language: str) -> bool:
        return (source_text, language) in self._entries

    def clear(self, language: str | None = None) -> None:
        """Clear all entries, or only those for one language."""
        if language is None:
            self._entries.clear()
            return
        for key in [k for k in self._entries if k[1] == language]:
            del self._entries[key]

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self, language: str | None = None) -> list[CacheEntry]:
        return [
            e for e in self._entries.values()
            if language is None or e.language == language
        ]

    # =========================================================================
    # Snapshots
    # =========================================================================

    def save(self, path: Path | str) -> bool:
        """
        Write the cache to a JSON snapshot.

        Returns True if written. Failures are logged, not raised.
        """
        path = Path(path)
        data = {
            f"{e.language}:{e.source_text}": {
                "text": e.translated_text,
                "timestamp": e.cached_at,
            }
            for e in self.entries()
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(
                    {"version": CACHE_VERSION, "saved_at": time.time(), "data": data},
                    ensure_ascii=False,
                ),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error(f"Failed to save translation cache to {path}: {e}")
            return False

        logger.info(f"Saved {len(data)} translations to {path}")
        return True

    def load(self, path: Path | str, expiry_days: int = DEFAULT_EXPIRY_DAYS) -> int:
        """
        Merge a JSON snapshot into the cache.

        Snapshots from another cache version are ignored, as are entries
        older than `expiry_days`. Returns the number of entries loaded.
        """
        path = Path(path)
        if not path.exists():
            return 0

        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load translation cache from {path}: {e}")
            return 0

        if not isinstance(parsed, dict) or parsed.get("version") != CACHE_VERSION:
            logger.info(f"Ignoring translation cache {path}: version mismatch")
            return 0

        now = time.time()
        loaded = 0
        for key, value in (parsed.get("data") or {}).items():
            language, sep, source_text = key.partition(":")
            if not sep or not isinstance(value, dict) or "text" not in value:
                continue
            timestamp = float(value.get("timestamp", 0))
            if (now - timestamp) / _SECONDS_PER_DAY >= expiry_days:
                continue
            self._entries[(source_text, language)] = CacheEntry(
                source_text, language, value["text"], cached_at=timestamp
            )
            loaded += 1

        logger.info(f"Loaded {loaded} translations from {path}")
        return loaded
