"""Scan configuration and per-user application directory.

The application directory holds the scan cache, the error log and an
optional ``config.yaml`` with default option values:

- Windows: ~/.effingo
- Linux/macOS: ~/.cache/effingo
"""

import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILE_NAME = "config.yaml"

KEEP_POLICIES = ("first", "sorted")
OUTPUT_FORMATS = ("text", "json", "csv")

# Option name -> accepted type for the YAML defaults file
_CONFIG_KEYS = {
    "workers": int,
    "include_hidden": bool,
    "output": str,
    "keep": str,
    "progress": bool,
}


def get_app_dir(home: Optional[Path] = None, system: Optional[str] = None) -> Path:
    """Get platform-specific application directory."""
    home = home if home is not None else Path.home()
    system = system if system is not None else platform.system()

    if system == "Windows":
        return home / ".effingo"
    return home / ".cache" / "effingo"


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Load option defaults from a YAML file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Dictionary of validated option values (empty if the file is empty)

    Raises:
        ValueError: If the file has unknown keys or values of the wrong type
    """
    with open(config_path, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    for key, value in config.items():
        expected = _CONFIG_KEYS.get(key)
        if expected is None:
            raise ValueError(f"Unknown config option: {key}")
        # bool is a subclass of int, reject it for integer options
        if not isinstance(value, expected) or (
            expected is int and isinstance(value, bool)
        ):
            raise ValueError(
                f"Config option '{key}' must be of type {expected.__name__}"
            )

    return config


@dataclass
class ScanConfig:
    """Options for one effingo invocation, built once at startup."""

    root: str
    cache_dir: Path
    ignore_cache: bool = False
    remove: bool = False
    include_hidden: bool = False
    max_workers: int = 8
    keep: str = "first"
    output: str = "text"
    verbose: bool = False

    def __post_init__(self) -> None:
        self.root = os.path.abspath(self.root)

        if self.max_workers < 1:
            raise ValueError("Number of workers must be at least 1")
        if self.keep not in KEEP_POLICIES:
            raise ValueError(f"Unknown keep policy: {self.keep}")
        if self.output not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {self.output}")
