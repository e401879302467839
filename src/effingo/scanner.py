"""Scan orchestration: cache reuse, fresh traversal and duplicate removal."""

import os
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from colorama import Fore, Style

from .cache import CacheBackend
from .config import ScanConfig
from .finder import DirectoryTraverser, validate_root
from .logwriter import LogWriter
from .results import ScanRecord, printable


@dataclass
class ScanOutcome:
    """Result of ScanOrchestrator.run()."""

    record: ScanRecord
    from_cache: bool
    cache_saved: bool = False
    error_count: int = 0


@dataclass
class RemovalSummary:
    """Files removed, kept and failed during a removal pass."""

    removed: List[str] = field(default_factory=list)
    kept: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)


class ScanOrchestrator:
    """Decides between a cached and a fresh scan, and removes duplicates."""

    def __init__(
        self,
        config: ScanConfig,
        cache: CacheBackend,
        traverser: Optional[DirectoryTraverser] = None,
        log_writer: Optional[LogWriter] = None,
    ):
        """
        Initialize scan orchestrator.

        Args:
            config: Options for this invocation
            cache: Backend used to read, save and evict scan records
            traverser: Traverser for fresh scans (built from config if omitted)
            log_writer: Optional persistent error log
        """
        self.config = config
        self.cache = cache
        self.log_writer = log_writer
        self.traverser = traverser or DirectoryTraverser(
            include_hidden=config.include_hidden,
            max_workers=config.max_workers,
            verbose=config.verbose,
            log_writer=log_writer,
        )

    def run(self) -> ScanOutcome:
        """
        Produce the scan record for the configured root.

        A cached record is reused only when caching is enabled, the cache is
        fresh and it was made for the same root. Otherwise the cache is
        evicted, the tree is traversed and the new record is saved.

        Raises:
            OSError: If the root is not a readable directory
        """
        validate_root(self.config.root)

        cached = self._read_cache()
        if cached is not None:
            if self.config.verbose:
                print(
                    f"{Fore.CYAN}Using cached results for "
                    f"{printable(cached.root_path)}{Style.RESET_ALL}"
                )
            return ScanOutcome(record=cached, from_cache=True)

        self.cache.evict()
        table = self.traverser.traverse(self.config.root)
        record = table.snapshot(self.config.root)

        cache_saved = True
        try:
            self.cache.save(record)
        except OSError as e:
            cache_saved = False
            self._report(f"Could not save cache: {e}", level="WARNING")

        return ScanOutcome(
            record=record,
            from_cache=False,
            cache_saved=cache_saved,
            error_count=self.traverser.error_count,
        )

    def _read_cache(self) -> Optional[ScanRecord]:
        if self.config.ignore_cache:
            return None

        cached = self.cache.read()
        if cached is None:
            return None

        if cached.root_path != self.config.root:
            if self.config.verbose:
                print(
                    f"Cached results are for {printable(cached.root_path)}, "
                    f"rescanning {printable(self.config.root)}"
                )
            return None

        return cached

    def remove_duplicates(self, record: ScanRecord) -> RemovalSummary:
        """
        Delete all but one file of every duplicate group.

        The cache is evicted first since it is about to describe deleted
        files. Paths are removed from the end of each group until one is
        left; with the "sorted" keep policy the group is sorted first so the
        lexicographically smallest path is kept. The record is reduced in
        place to what is still on disk.
        """
        self.cache.evict()
        summary = RemovalSummary()
        still_duplicated = []

        for hash_val in record.duplicated_hashes:
            location = list(record.locations[hash_val])
            if self.config.keep == "sorted":
                location.sort()

            remaining = []
            while len(location) > 1:
                path = location.pop()
                print(f"Removing duplicate file {printable(path)}")
                try:
                    os.remove(path)
                    summary.removed.append(path)
                except OSError as e:
                    summary.failed.append((path, str(e)))
                    remaining.append(path)
                    self._report(f"Failed to delete {path}: {e}")

            kept = location[0]
            summary.kept.append(kept)
            print(f"Remaining {printable(kept)}\n")

            record.locations[hash_val] = [kept] + remaining[::-1]
            if remaining:
                still_duplicated.append(hash_val)

        record.duplicated_hashes = still_duplicated
        return summary

    def _report(self, message: str, level: str = "ERROR") -> None:
        color = Fore.YELLOW if level == "WARNING" else Fore.RED
        print(
            f"{color}{level}: {printable(message)}{Style.RESET_ALL}", file=sys.stderr
        )
        if self.log_writer is not None:
            self.log_writer.err(message)
