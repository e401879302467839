"""Shared result table for concurrent hashing tasks."""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


def printable(text: str) -> str:
    """Return text with undecodable filename bytes shown as escapes."""
    try:
        raw = text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        return text.encode("utf-8", "backslashreplace").decode("utf-8")
    return raw.decode("utf-8", "backslashreplace")


@dataclass
class ScanRecord:
    """
    Result of one scan: fingerprint locations, duplicate index and root.

    ``locations`` maps a hex fingerprint to the ordered list of paths sharing
    it. ``duplicated_hashes`` lists the fingerprints whose location list has
    two or more entries, in the order they became duplicated.
    """

    root_path: str
    locations: Dict[str, List[str]] = field(default_factory=dict)
    duplicated_hashes: List[str] = field(default_factory=list)

    def duplicate_groups(self) -> List[Tuple[str, List[str]]]:
        """Return (fingerprint, paths) pairs for every duplicated fingerprint."""
        return [(h, self.locations[h]) for h in self.duplicated_hashes]

    def redundant_count(self) -> int:
        """Number of files that a removal pass would delete."""
        return sum(len(self.locations[h]) - 1 for h in self.duplicated_hashes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the cache artifact layout."""
        return {
            "duplicated_hashes": list(self.duplicated_hashes),
            "locations": {h: list(paths) for h, paths in self.locations.items()},
            "root_path": self.root_path,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ScanRecord":
        """
        Build a record from its serialized form.

        Raises:
            ValueError: If the structure does not match the cache layout
        """
        if not isinstance(data, dict):
            raise ValueError("Scan record must be a JSON object")

        root_path = data.get("root_path")
        locations = data.get("locations")
        duplicated = data.get("duplicated_hashes")

        if not isinstance(root_path, str):
            raise ValueError("'root_path' must be a string")
        if not isinstance(locations, dict):
            raise ValueError("'locations' must be an object")
        if not isinstance(duplicated, list):
            raise ValueError("'duplicated_hashes' must be a list")

        for hash_val, paths in locations.items():
            if not isinstance(paths, list) or not all(
                isinstance(p, str) for p in paths
            ):
                raise ValueError(f"Locations for {hash_val} must be a list of paths")

        for hash_val in duplicated:
            if hash_val not in locations or len(locations[hash_val]) < 2:
                raise ValueError(f"Duplicated hash {hash_val} has no duplicate group")
        if len(set(duplicated)) != len(duplicated):
            raise ValueError("'duplicated_hashes' lists a hash more than once")

        listed = set(duplicated)
        for hash_val, paths in locations.items():
            if len(paths) >= 2 and hash_val not in listed:
                raise ValueError(f"Hash {hash_val} has duplicates but is not listed")

        return cls(
            root_path=root_path,
            locations={h: list(paths) for h, paths in locations.items()},
            duplicated_hashes=list(duplicated),
        )


class ResultTable:
    """
    Thread-safe mapping from fingerprint to the paths sharing it.

    All mutation goes through record(), which holds a single lock for the
    whole read-modify-write.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._locations: Dict[str, List[str]] = {}
        self._duplicated: List[str] = []

    def record(self, fingerprint: str, path: str) -> None:
        """
        Add a path under its fingerprint.

        The fingerprint enters the duplicate index exactly once, when its
        location list grows from one entry to two.
        """
        with self._lock:
            paths = self._locations.get(fingerprint)
            if paths is None:
                self._locations[fingerprint] = [path]
                return
            if len(paths) == 1:
                self._duplicated.append(fingerprint)
            paths.append(path)

    def __len__(self) -> int:
        with self._lock:
            return len(self._locations)

    def snapshot(self, root_path: str) -> ScanRecord:
        """Copy the current state into a ScanRecord."""
        with self._lock:
            return ScanRecord(
                root_path=root_path,
                locations={h: list(p) for h, p in self._locations.items()},
                duplicated_hashes=list(self._duplicated),
            )
