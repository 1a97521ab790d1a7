"""TTL read-through cache for vault text files."""

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextCacheEntry:
    value: str
    expires_at: float


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


class TextCache:
    """Caches file contents by absolute path for a caller-supplied TTL.

    Failed reads (including missing files) are never cached, so the next
    call retries immediately. Writes to the vault do not invalidate entries.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the cache.

        Args:
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self._clock = clock
        self._entries: dict[str, TextCacheEntry] = {}

    async def get_or_load(self, path: Path | str, ttl: float) -> str | None:
        """
        Return cached text for path, reading the file on miss or expiry.

        Args:
            path: File path (used as cache key once made absolute)
            ttl: Time to live in seconds for a fresh entry

        Returns:
            File contents, or None if the file could not be read
        """
        key = str(Path(path).absolute())
        now = self._clock()
        cached = self._entries.get(key)
        if cached is not None and now < cached.expires_at:
            logger.debug(f"Cache hit: {key}")
            return cached.value

        try:
            value = await asyncio.to_thread(_read_text, key)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Cache miss, unreadable: {key} ({e.__class__.__name__})")
            return None

        self._entries[key] = TextCacheEntry(value=value, expires_at=now + ttl)
        logger.debug(f"Cache miss, loaded: {key}")
        return value

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
