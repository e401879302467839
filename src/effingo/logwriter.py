"""Persistent error log for scan runs."""

from datetime import datetime
from pathlib import Path
from typing import List, Protocol

LOG_FILE_NAME = ".effingo_log"
MAX_LOG_FILE_SIZE = 5_000_000


class LogWriter(Protocol):
    """Protocol for error log writers."""

    def err(self, message: str) -> None:
        """Buffer an error message."""
        ...

    def flush(self) -> bool:
        """Write buffered messages to storage."""
        ...


class FileLogWriter:
    """
    Appends buffered error messages to a log file.

    The file is truncated before writing once it grows past ``max_bytes``.
    """

    def __init__(self, log_path: Path, max_bytes: int = MAX_LOG_FILE_SIZE):
        self.log_path = log_path
        self.max_bytes = max_bytes
        self._messages: List[str] = []

    def err(self, message: str) -> None:
        self._messages.append(f"{datetime.now().isoformat()} - {message}\n")

    @property
    def pending(self) -> int:
        return len(self._messages)

    def flush(self) -> bool:
        """
        Append buffered messages to the log file.

        Returns:
            True if all messages were written
        """
        if not self._messages:
            return True

        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            mode = "a"
            if self.log_path.exists() and self.log_path.stat().st_size > self.max_bytes:
                mode = "w"
            with open(
                self.log_path, mode, encoding="utf-8", errors="backslashreplace"
            ) as f:
                f.write("".join(self._messages))
        except (OSError, UnicodeError):
            return False

        self._messages.clear()
        return True
