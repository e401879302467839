"""Directory traversal and concurrent content hashing."""

import os
import sys
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Deque, Iterator, List, Optional

from colorama import Fore, Style
from tqdm import tqdm

from .hasher import FileHasher
from .logwriter import LogWriter
from .results import ResultTable, printable

HIDDEN_PREFIX = "."


def validate_root(root: str) -> None:
    """
    Check that root is an existing, readable directory.

    Raises:
        FileNotFoundError: If the path does not exist
        NotADirectoryError: If the path is not a directory
        PermissionError: If the directory cannot be listed
    """
    if not os.path.exists(root):
        raise FileNotFoundError(f"Path does not exist: {root}")
    if not os.path.isdir(root):
        raise NotADirectoryError(f"Not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise PermissionError(f"Directory is not readable: {root}")


class DirectoryTraverser:
    """Walks a directory tree and hashes every file it finds."""

    def __init__(
        self,
        include_hidden: bool = False,
        max_workers: int = 8,
        verbose: bool = False,
        log_writer: Optional[LogWriter] = None,
        hash_file: Callable[[str], str] = FileHasher.compute_file_hash,
    ):
        """
        Initialize directory traverser.

        Args:
            include_hidden: Visit files and directories whose name starts
                with a dot (default: False)
            max_workers: Maximum number of worker threads for hashing; files
                are hashed on the calling thread when this is 1 (default: 8)
            verbose: Show progress output
            log_writer: Optional persistent error log
            hash_file: Function mapping a file path to its fingerprint
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.include_hidden = include_hidden
        self.max_workers = max_workers
        self.verbose = verbose
        self.log_writer = log_writer
        self.hash_file = hash_file

        self.files_seen = 0
        self.files_hashed = 0
        self.error_count = 0
        self._lock = threading.Lock()
        self._progress: Optional[tqdm] = None

    def traverse(self, root: str) -> ResultTable:
        """
        Hash every file under root and group paths by fingerprint.

        Directories are listed on the calling thread; file hashing runs on a
        thread pool with at most ``max_workers * 2`` tasks in flight. Returns
        only once every dispatched hashing task has finished.

        Args:
            root: Directory to scan

        Returns:
            Populated result table
        """
        table = ResultTable()
        self.files_seen = 0
        self.files_hashed = 0
        self.error_count = 0

        if self.verbose:
            workers_info = (
                f" (using {self.max_workers} worker threads)"
                if self.max_workers > 1
                else ""
            )
            print(f"Scanning {root}{workers_info}...")

        self._progress = tqdm(
            desc="Hashing files", unit="file", disable=not self.verbose
        )
        try:
            if self.max_workers == 1:
                for file_path in self.iter_files(root):
                    self._hash_into(table, file_path)
            else:
                self._hash_parallel(table, root)
        finally:
            self._progress.close()
            self._progress = None

        if self.verbose:
            print(
                f"{Fore.CYAN}Hashed {self.files_hashed}/{self.files_seen} files"
                f"...{Fore.GREEN}done{Style.RESET_ALL}"
            )
            if self.error_count > 0:
                print(f"Encountered {self.error_count} error(s) during processing")

        return table

    def _hash_parallel(self, table: ResultTable, root: str) -> None:
        """Dispatch hashing tasks as files are discovered, then join them."""
        slots = threading.BoundedSemaphore(self.max_workers * 2)
        failures: List[BaseException] = []

        def finish(future: Future) -> None:
            # Anything other than the per-file OSErrors handled in tasks
            error = future.exception()
            if error is not None:
                with self._lock:
                    failures.append(error)
            slots.release()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for file_path in self.iter_files(root):
                slots.acquire()
                executor.submit(self._hash_into, table, file_path).add_done_callback(
                    finish
                )

        if failures:
            raise failures[0]

    def iter_files(self, root: str) -> Iterator[str]:
        """
        Yield every regular file under root.

        Symlinks are never followed or yielded, so a link and its target
        cannot end up in the same duplicate group.

        Uses an explicit queue of pending directories instead of recursion.
        Entries are visited in name order within each directory.
        """
        pending: Deque[str] = deque([root])

        while pending:
            directory = pending.popleft()
            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                self._log_error(f"Error reading directory {directory}: {e}")
                continue

            for entry in entries:
                if not self.include_hidden and entry.name.startswith(HIDDEN_PREFIX):
                    continue

                try:
                    if entry.is_dir(follow_symlinks=False):
                        pending.append(entry.path)
                        continue
                    is_file = entry.is_file(follow_symlinks=False)
                except OSError as e:
                    self._log_error(f"Error reading entry {entry.path}: {e}")
                    continue

                if is_file:
                    self.files_seen += 1
                    yield entry.path

    def _hash_into(self, table: ResultTable, file_path: str) -> None:
        """Hash a single file and record it in the table."""
        try:
            fingerprint = self.hash_file(file_path)
        except OSError as e:
            self._log_error(f"Error hashing {file_path}: {e}")
            self._advance()
            return

        table.record(fingerprint, file_path)
        with self._lock:
            self.files_hashed += 1
        self._advance()

    def _advance(self) -> None:
        with self._lock:
            if self._progress is not None:
                self._progress.update(1)

    def _log_error(self, message: str) -> None:
        """Log error message to stderr and the error log."""
        with self._lock:
            self.error_count += 1
            if self.log_writer is not None:
                self.log_writer.err(message)
            tqdm.write(
                f"{Fore.RED}ERROR: {printable(message)}{Style.RESET_ALL}",
                file=sys.stderr,
            )
