"""Cache backend implementations for scan result storage."""

import json
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from .results import ScanRecord

CACHE_FILE_NAME = ".effingo_cache"
CACHE_TTL_SECONDS = 120


def is_expired(age: float, ttl: float = CACHE_TTL_SECONDS) -> bool:
    """
    Check whether a cache artifact of the given age is expired.

    Ages strictly greater than the TTL are expired; an age exactly equal to
    the TTL is still valid.
    """
    return age > ttl


class CacheBackend(Protocol):
    """Protocol for scan cache backend implementations."""

    def save(self, record: ScanRecord) -> None:
        """Persist a scan record, replacing any previous one."""
        ...

    def read(self) -> Optional[ScanRecord]:
        """Return the cached record, or None if no usable cache exists."""
        ...

    def evict(self) -> bool:
        """Delete the cached record."""
        ...


class FileCacheBackend:
    """
    JSON file cache backend for scan records.

    Validity is judged by the artifact's modification time: a record older
    than ``ttl`` seconds is treated as absent. Root matching is left to the
    caller.
    """

    def __init__(
        self,
        cache_dir: Path,
        ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        verbose: bool = False,
    ):
        """
        Initialize file cache backend.

        Args:
            cache_dir: Directory holding the cache artifact
            ttl: Maximum artifact age in seconds (default: 120)
            clock: Source of the current time in epoch seconds
            verbose: Print why a cache was rejected
        """
        self.cache_dir = cache_dir
        self.cache_path = cache_dir / CACHE_FILE_NAME
        self.ttl = ttl
        self._clock = clock
        self.verbose = verbose

    def save(self, record: ScanRecord) -> None:
        """
        Write record to disk as JSON.

        Raises:
            OSError: If the cache directory or file cannot be written
        """
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        with open(self.cache_path, "w") as f:
            json.dump(record.to_dict(), f)

    def read(self) -> Optional[ScanRecord]:
        """Load the cached record if present, fresh and well-formed."""
        try:
            modified_at = self.cache_path.stat().st_mtime
        except OSError:
            return None

        if self.has_expired(modified_at):
            self._note("Cache expired")
            return None

        try:
            with open(self.cache_path) as f:
                data = json.load(f)
            return ScanRecord.from_dict(data)
        except (json.JSONDecodeError, OSError, ValueError) as e:
            self._note(f"Error decoding cache file: {e}")
            return None

    def evict(self) -> bool:
        """
        Remove the cache artifact.

        Returns:
            True if a file was removed
        """
        try:
            self.cache_path.unlink()
            return True
        except OSError:
            return False

    def has_expired(self, modified_at: float) -> bool:
        """Check a modification timestamp against the TTL window."""
        return is_expired(self._clock() - modified_at, self.ttl)

    def _note(self, message: str) -> None:
        if self.verbose:
            print(message)
