"""Content hashing utilities for duplicate detection."""

import hashlib
from pathlib import Path
from typing import Union


class FileHasher:
    """Computes content fingerprints for files."""

    CHUNK_SIZE = 65536

    @staticmethod
    def compute_bytes_hash(data: bytes) -> str:
        """Compute SHA256 hex digest of a byte string."""
        return hashlib.sha256(data).hexdigest()

    @staticmethod
    def compute_file_hash(file_path: Union[str, Path]) -> str:
        """
        Compute SHA256 hash of file content.

        Args:
            file_path: Path to the file to hash

        Returns:
            64-character lowercase hex digest

        Raises:
            OSError: If the file cannot be opened or read
        """
        sha256_hash = hashlib.sha256()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(FileHasher.CHUNK_SIZE), b""):
                sha256_hash.update(chunk)
        return sha256_hash.hexdigest()
