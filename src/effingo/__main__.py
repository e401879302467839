"""CLI interface for effingo."""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from colorama import Fore, Style, init

try:
    from shtab import DIRECTORY, FILE
except ImportError:
    # shtab not installed - tab completion won't work but that's okay
    DIRECTORY = FILE = None  # type: ignore

from . import __version__
from .cache import FileCacheBackend
from .config import (
    CONFIG_FILE_NAME,
    KEEP_POLICIES,
    OUTPUT_FORMATS,
    ScanConfig,
    get_app_dir,
    load_config_file,
)
from .logwriter import LOG_FILE_NAME, FileLogWriter
from .report import (
    format_output_csv,
    format_output_json,
    format_output_text,
    format_removal_summary,
)
from .results import printable
from .scanner import ScanOrchestrator

# Initialize colorama for cross-platform color support
init(autoreset=True)


def get_parser() -> argparse.ArgumentParser:
    """
    Get the argument parser for effingo.

    This function is used by tab completion tools (e.g., shtab) to generate
    completion scripts.

    Returns:
        ArgumentParser configured with all effingo options
    """
    parser = argparse.ArgumentParser(
        prog="effingo",
        description="Find files with identical content under a directory tree.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -d /path/to/dir
  %(prog)s -d /path/to/dir -r
  %(prog)s -d ~/Downloads --all --no-cache
  %(prog)s -d /data --output json --no-progress
        """,
    )

    dir_arg = parser.add_argument(
        "-d",
        "--dir",
        default=".",
        metavar="PATH",
        help="Directory to search for duplicate files (default: current directory)",
    )
    # Enable directory completion for tab completion (shtab)
    if DIRECTORY is not None:
        dir_arg.complete = DIRECTORY  # type: ignore

    parser.add_argument(
        "-r",
        "--remove",
        action="store_true",
        help="Remove duplicate files, keeping one copy of each",
    )

    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        default=None,
        help="Include hidden files and directories (names starting with '.')",
    )

    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ignore cached results and scan the directory again",
    )

    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=None,
        metavar="N",
        help="Number of worker threads for hashing "
        "(default: 8, use 1 for sequential)",
    )

    parser.add_argument(
        "-o",
        "--output",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--keep",
        choices=KEEP_POLICIES,
        default=None,
        help="Which file to keep when removing: 'first' keeps the first file "
        "found in this run, 'sorted' keeps the alphabetically first path "
        "(default: first)",
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable progress output (progress shown by default)",
    )

    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete cached scan results and exit",
    )

    config_arg = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help=f"YAML file with option defaults (default: <app dir>/{CONFIG_FILE_NAME})",
    )
    if FILE is not None:
        config_arg.complete = FILE  # type: ignore

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = get_parser()
    return parser.parse_args(argv)


def load_defaults(args: argparse.Namespace, app_dir: Path) -> Dict[str, Any]:
    """Load option defaults from --config or the app directory config file."""
    if args.config is not None:
        return load_config_file(args.config)

    default_path = app_dir / CONFIG_FILE_NAME
    if default_path.exists():
        return load_config_file(default_path)
    return {}


def build_config(
    args: argparse.Namespace, defaults: Dict[str, Any], app_dir: Path
) -> ScanConfig:
    """Combine command line flags with file defaults; flags win."""

    def pick(value: Any, key: str, fallback: Any) -> Any:
        return value if value is not None else defaults.get(key, fallback)

    output = pick(args.output, "output", "text")
    # Progress output would corrupt machine-readable reports
    show_progress = not args.no_progress and defaults.get("progress", True)

    return ScanConfig(
        root=args.dir,
        cache_dir=app_dir,
        ignore_cache=args.no_cache,
        remove=args.remove,
        include_hidden=pick(args.all, "include_hidden", False),
        max_workers=pick(args.workers, "workers", 8),
        keep=pick(args.keep, "keep", "first"),
        output=output,
        verbose=show_progress and (output == "text" or args.remove),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    args = parse_args(argv)
    app_dir = get_app_dir()

    # Handle --clear-cache option
    if args.clear_cache:
        cache = FileCacheBackend(app_dir)
        if cache.evict():
            print(f"Cache cleared: {cache.cache_path}")
            return 0
        else:
            print(f"No cache to clear (or failed to delete): {cache.cache_path}")
            return 1

    try:
        defaults = load_defaults(args, app_dir)
        config = build_config(args, defaults, app_dir)
    except (OSError, ValueError) as e:
        print(f"Error: {printable(str(e))}", file=sys.stderr)
        return 1

    log_writer = FileLogWriter(app_dir / LOG_FILE_NAME)
    try:
        return run_scan(config, log_writer)
    finally:
        log_writer.flush()


def run_scan(config: ScanConfig, log_writer: FileLogWriter) -> int:
    """Scan the configured root, then report or remove duplicates."""
    cache = FileCacheBackend(config.cache_dir, verbose=config.verbose)
    orchestrator = ScanOrchestrator(config, cache, log_writer=log_writer)

    try:
        outcome = orchestrator.run()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130
    except OSError as e:
        print(f"Error: {printable(str(e))}", file=sys.stderr)
        return 1

    record = outcome.record

    # Handle remove mode
    if config.remove:
        try:
            summary = orchestrator.remove_duplicates(record)
        except KeyboardInterrupt:
            print("\nRemoval cancelled by user.", file=sys.stderr)
            return 130
        format_removal_summary(summary)
        return 1 if summary.failed else 0

    # Format and output results
    if config.output == "json":
        format_output_json(record)
    elif config.output == "csv":
        format_output_csv(record)
    else:
        format_output_text(record)
        if config.verbose and outcome.from_cache:
            print(f"{Style.DIM}(results served from cache){Style.RESET_ALL}")
        elif config.verbose and outcome.error_count:
            print(
                f"{Fore.YELLOW}{outcome.error_count} path(s) could not be read"
                f"{Style.RESET_ALL}"
            )

    # Exit with non-zero if duplicates found (for scripting)
    return 0 if not record.duplicated_hashes else 2


if __name__ == "__main__":
    sys.exit(main())
