"""Output formatting for scan results."""

import csv
import json
import sys
from typing import Any, Dict, List

from colorama import Fore, Style

from .results import ScanRecord, printable
from .scanner import RemovalSummary


def format_output_text(record: ScanRecord) -> None:
    """Print duplicate groups in text format."""
    groups = record.duplicate_groups()
    if not groups:
        print("No duplicates found.")
        return

    print(
        f"{Fore.CYAN}{Style.BRIGHT}Found {len(groups)} group(s) "
        f"of duplicate files:{Style.RESET_ALL}\n"
    )

    for idx, (hash_val, paths) in enumerate(groups, 1):
        print(
            f"{Fore.CYAN}{Style.BRIGHT}Group {idx}{Style.RESET_ALL} "
            f"{Style.DIM}(Hash: {hash_val[:16]}...){Style.RESET_ALL}"
        )
        for i, path in enumerate(paths):
            # Use └─ for last item, ├─ for others
            tree_char = "└─" if i == len(paths) - 1 else "├─"
            print(f"  {tree_char} {printable(path)}")
        print()

    print(
        f"{Style.DIM}{record.redundant_count()} redundant file(s){Style.RESET_ALL}"
    )


def build_output_json(record: ScanRecord) -> List[Dict[str, Any]]:
    """Build the JSON report structure: one entry per duplicate group."""
    return [
        {"hash": hash_val, "files": list(paths)}
        for hash_val, paths in record.duplicate_groups()
    ]


def format_output_json(record: ScanRecord) -> None:
    """Print duplicate groups in JSON format."""
    print(json.dumps(build_output_json(record), indent=2))


def format_output_csv(record: ScanRecord) -> None:
    """Print duplicate groups in CSV format."""
    writer = csv.writer(sys.stdout)
    writer.writerow(["group_id", "hash", "file_path"])
    for idx, (hash_val, paths) in enumerate(record.duplicate_groups(), 1):
        for path in paths:
            writer.writerow([idx, hash_val, printable(path)])


def format_removal_summary(summary: RemovalSummary) -> None:
    """Print the outcome of a removal pass."""
    if not summary.kept:
        print("No duplicates to remove.")
        return

    print(
        f"{Fore.GREEN}Removed {len(summary.removed)} file(s), "
        f"kept {len(summary.kept)} file(s).{Style.RESET_ALL}"
    )
    if summary.failed:
        print(
            f"{Fore.RED}Failed to remove {len(summary.failed)} file(s):"
            f"{Style.RESET_ALL}"
        )
        for path, reason in summary.failed:
            print(f"  ✗ {printable(path)}: {printable(reason)}")
