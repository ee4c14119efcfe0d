"""
labordata/cache.py

Versioned, TTL-bound key/value cache for BLS results.

Entries are stored as JSON text:

    {"data": ..., "cachedAt": ISO-8601, "expiresAt": ISO-8601, "version": N}

An entry is only returned while its version equals CACHE_VERSION and the
clock is before expiresAt. Stale, old-version and unreadable entries are
deleted on read and reported as a miss.

Caching is an optimisation: storage failures on write are logged and
swallowed, never raised to the caller.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Protocol

from labordata.config import CACHE_PREFIX, CACHE_TTL_S, CACHE_VERSION

logger = logging.getLogger(__name__)

KEY_SEPARATOR = ":"


class CacheDomain:
    """Known data domains; the first component of every cache key."""

    OES_WAGES = "oes_wages"
    OES_EMPLOYMENT = "oes_employment"
    MARKET_DATA = "market_data"
    REGIONAL_COMPARE = "regional_compare"
    CAREER_OUTLOOK = "career_outlook"
    JOLTS_OPENINGS = "jolts_openings"
    LNS_UNEMPLOYMENT = "lns_unemployment"
    LAU_UNEMPLOYMENT = "lau_unemployment"
    CPI_CURRENT = "cpi_current"
    SNAPSHOT = "snapshot"


def build_cache_key(domain: str, *parts: object) -> str:
    """
    Build a cache key from explicit, ordered parts.

    "bls_cache:oes_wages:151252:S0600000". Parts may not contain the separator,
    so keys from different domains can never collide.
    """
    if domain not in CACHE_TTL_S:
        raise ValueError(f"Unknown cache domain: {domain!r}")
    rendered = [str(p) for p in parts]
    for part in rendered:
        if KEY_SEPARATOR in part:
            raise ValueError(f"Cache key part may not contain {KEY_SEPARATOR!r}: {part!r}")
    return KEY_SEPARATOR.join([CACHE_PREFIX, domain, *rendered])


def ttl_for(domain: str) -> int:
    return CACHE_TTL_S[domain]


# ---------------------------------------------------------------------
# Storage media
# ---------------------------------------------------------------------
class Storage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> Iterable[str]: ...


class MemoryStorage:
    """In-process storage. Used by tests and short-lived sessions."""

    def __init__(self):
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStorage:
    """
    All entries in one JSON object on disk.

    Every write rewrites the file through a temporary file + os.replace, so a
    crash mid-write leaves the previous version intact.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            items = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", self.path, e)
            return {}
        return items if isinstance(items, dict) else {}

    def _save(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".bls_cache.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as fh:
                json.dump(items, fh)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)

    def keys(self) -> list[str]:
        return list(self._load())


# ---------------------------------------------------------------------
# Cache store
# ---------------------------------------------------------------------
def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


class CacheStore:
    """
    TTL + version aware cache over a Storage medium.

    Parameters
    ----------
    storage:
        Where entries live (MemoryStorage, JsonFileStorage, or anything with
        the same four methods).
    clock:
        Returns "now" as a POSIX timestamp. Injected by tests.
    version:
        Schema version written into new entries and required on read.
    """

    def __init__(
        self,
        storage: Optional[Storage] = None,
        *,
        clock: Callable[[], float] = time.time,
        version: int = CACHE_VERSION,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self.clock = clock
        self.version = version

    def _discard(self, key: str) -> None:
        try:
            self.storage.remove_item(key)
        except Exception as e:
            logger.warning("Could not remove cache entry %s: %s", key, e)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached payload, or None on miss/expiry/version mismatch."""
        try:
            raw = self.storage.get_item(key)
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None
        if raw is None:
            logger.debug("Cache MISS %s", key)
            return None

        try:
            entry = json.loads(raw)
            version = entry["version"]
            expires_at = datetime.fromisoformat(entry["expiresAt"]).timestamp()
            data = entry["data"]
        except (ValueError, KeyError, TypeError) as e:
            logger.debug("Cache entry %s unreadable (%s); removing", key, e)
            self._discard(key)
            return None

        if version != self.version:
            logger.debug("Cache entry %s has version %s (want %s); removing",
                         key, version, self.version)
            self._discard(key)
            return None

        if self.clock() >= expires_at:
            logger.debug("Cache EXPIRED %s", key)
            self._discard(key)
            return None

        logger.debug("Cache HIT %s", key)
        return data

    def put(self, key: str, value: Any, ttl: float) -> None:
        """Store value for ttl seconds. Never raises."""
        now = self.clock()
        entry = {
            "data": value,
            "cachedAt": _iso(now),
            "expiresAt": _iso(now + ttl),
            "version": self.version,
        }
        try:
            self.storage.set_item(key, json.dumps(entry))
        except Exception as e:
            logger.warning("Failed to cache %s: %s", key, e)
            return
        logger.debug("Cache SET %s (ttl=%ss)", key, ttl)

    def clear_all(self, prefix: Optional[str] = None) -> int:
        """Remove every entry under prefix (default: the whole cache); return how many went."""
        prefix = prefix or CACHE_PREFIX
        removed = 0
        try:
            doomed = [k for k in self.storage.keys() if k.startswith(prefix)]
        except Exception as e:
            logger.warning("Failed to list cache keys: %s", e)
            return 0
        for key in doomed:
            try:
                self.storage.remove_item(key)
            except Exception as e:
                logger.warning("Failed to remove cache entry %s: %s", key, e)
                continue
            removed += 1
        logger.info("Cleared %d cache entries under %r", removed, prefix)
        return removed
