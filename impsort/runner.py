"""
Command-line driver for impsort.

Finds Java files, sorts or checks their imports on a thread pool, keeps the
hash cache up to date and reports how many files needed sorting.

Examples:
  python -m impsort check
  python -m impsort sort src/main/java --groups "java.,javax.,org.,com." --remove-unused
  python -m impsort sort Foo.java --line-ending KEEP --backup
"""

import argparse
import concurrent.futures
import logging
import os
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from .cache import HashCache, content_hash
from .config import DEFAULT_DIRECTORIES, ImpSortConfig, find_config_file, load_config
from .errors import ImportsNotSortedError, ImpSortError
from .file_filter import find_files
from .sorter import ImpSort

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


class Mode(str, Enum):
    CHECK = "check"
    SORT = "sort"


@dataclass(frozen=True)
class FileOutcome:
    path: Path
    already_sorted: bool = False
    error: Optional[Exception] = None


@dataclass(frozen=True)
class RunSummary:
    """Counts reported at the end of a run."""
    total: int
    already_sorted: int
    needed_sorting: int
    failures: List[Exception] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failures


def format_duration(seconds: float) -> str:
    """Format seconds as mm:ss.mmm."""
    millis_total = int(seconds * 1000)
    minutes, millis_total = divmod(millis_total, 60_000)
    secs, millis = divmod(millis_total, 1000)
    return f"{minutes:02d}:{secs:02d}.{millis:03d}"


def _search_dir(directory: Path, config: ImpSortConfig, warn_on_bad_dir: bool) -> List[Path]:
    if not directory.is_dir():
        if warn_on_bad_dir:
            logger.warning(f"Directory does not exist or is not a directory: {directory}")
        return []
    logger.debug(f"Adding directory {directory}")
    return find_files(directory, config.includes, config.excludes)


def collect_files(paths: Sequence[str], config: ImpSortConfig, base_dir: Path) -> List[Path]:
    """
    Collect the files of a run.

    Explicit paths win: files are taken as-is and directories are searched.
    Without paths the configured directories are searched, or
    src/main/java and src/test/java under ``base_dir`` when none are set.
    """
    files: List[Path] = []
    if paths:
        for path in map(Path, paths):
            if path.is_file():
                files.append(path)
            else:
                files.extend(_search_dir(path, config, warn_on_bad_dir=True))
    elif config.directories:
        for directory in config.directories:
            files.extend(_search_dir(base_dir / directory, config, warn_on_bad_dir=True))
    else:
        for directory in DEFAULT_DIRECTORIES:
            files.extend(_search_dir(base_dir / directory, config, warn_on_bad_dir=False))
    return sorted(set(files))


def process_file(path: Path, sorter: ImpSort, mode: Mode, cache: HashCache,
                 base_dir: Path, backup: bool = False) -> FileOutcome:
    """Check or sort one file, updating the cache when it ends up sorted."""
    logger.debug(f"Reading file {path}")
    try:
        data = path.read_bytes()
        key = HashCache.key_for(path, base_dir)
        digest = content_hash(data)
        if cache.is_unchanged(key, digest):
            logger.debug(f"Unchanged: {path}")
            return FileOutcome(path, already_sorted=True)

        result = sorter.parse_file(path, data)
        for imp in result.imports:
            logger.debug(f"Found import: {imp}")

        if not result.is_sorted:
            if mode is Mode.CHECK:
                error = ImportsNotSortedError(path)
                logger.error(str(error))
                return FileOutcome(path, error=error)
            if backup:
                result.save_backup(path.with_name(path.name + ".bak"))
            result.save_sorted(path)
            digest = content_hash(result.render())
            logger.info(f"Sorted imports in {path}")

        cache.update(key, digest)
        return FileOutcome(path, already_sorted=result.is_sorted)
    except (ImpSortError, OSError, UnicodeDecodeError) as e:
        logger.error(f"Error processing file {path}: {e}")
        return FileOutcome(path, error=e)


def run(config: ImpSortConfig, mode: Mode = Mode.SORT, paths: Sequence[str] = (),
        base_dir=".", backup: bool = False) -> RunSummary:
    """
    Sort or check every file selected by ``config`` and ``paths``.

    Returns:
        RunSummary; ``failures`` lists unsorted files in check mode and every
        file that could not be processed
    """
    if config.skip:
        logger.info("Skipping execution of impsort")
        return RunSummary(0, 0, 0)

    base_dir = Path(base_dir)
    files = collect_files(paths, config, base_dir)
    cache_file = config.cache_file
    if cache_file and not os.path.isabs(cache_file):
        cache_file = str(base_dir / cache_file)
    cache = HashCache.load(cache_file)
    logger.info(f"Using compiler compliance level: {config.language_level}")
    sorter = ImpSort.from_config(config)

    jobs = config.jobs
    if jobs == 0:
        jobs = min(4, len(files), os.cpu_count() or 1)
    jobs = max(1, jobs)

    start_time = time.time()
    if jobs == 1:
        outcomes = [process_file(f, sorter, mode, cache, base_dir, backup) for f in files]
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as executor:
            futures = [
                executor.submit(process_file, f, sorter, mode, cache, base_dir, backup)
                for f in files
            ]
            # collect in file order
            outcomes = [future.result() for future in futures]
    elapsed = time.time() - start_time

    failures = [o.error for o in outcomes if o.error is not None]
    already_sorted = sum(1 for o in outcomes if o.already_sorted)
    needed_sorting = sum(
        1 for o in outcomes
        if not o.already_sorted and (o.error is None or isinstance(o.error, ImportsNotSortedError))
    )
    summary = RunSummary(already_sorted + needed_sorting, already_sorted, needed_sorting,
                         failures, elapsed)
    log_summary(summary)

    if not failures and cache.modified:
        cache.store()
    return summary


def log_summary(summary: RunSummary) -> None:
    width = len(str(summary.total))
    logger.info(f"{'Total Files Processed':>22}: {summary.total:>{width}d} in {format_duration(summary.elapsed)}")
    logger.info(f"{'Already Sorted':>22}: {summary.already_sorted:>{width}d}")
    logger.info(f"{'Needed Sorting':>22}: {summary.needed_sorting:>{width}d}")


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(message)s", stream=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="impsort",
        description="Sort the imports of Java source files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )

    parser.add_argument(
        "mode",
        choices=[m.value for m in Mode],
        help="check: fail on unsorted files; sort: rewrite them in place"
    )

    parser.add_argument(
        "paths",
        nargs="*",
        help="Files or directories (default: src/main/java and src/test/java)"
    )

    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--base-dir", default=".", help="Project base directory (default: .)")
    parser.add_argument("--groups", help="Group spec for non-static imports, e.g. 'java.,javax.,org.'")
    parser.add_argument("--static-groups", help="Group spec for static imports")
    parser.add_argument(
        "--static-after", action=argparse.BooleanOptionalAction, default=None,
        help="Emit static imports after non-static ones"
    )
    parser.add_argument(
        "--join-static-with-non-static", action=argparse.BooleanOptionalAction, default=None,
        help="No blank line between static and non-static imports"
    )
    parser.add_argument(
        "--remove-unused", action=argparse.BooleanOptionalAction, default=None,
        help="Remove imports whose name never appears in the file"
    )
    parser.add_argument(
        "--treat-same-package-as-unused", action=argparse.BooleanOptionalAction, default=None,
        help="With --remove-unused, also remove imports from the file's own package"
    )
    parser.add_argument(
        "--breadth-first-comparator", action=argparse.BooleanOptionalAction, default=None,
        help="Sort shorter paths before their nested extensions (default: on)"
    )
    parser.add_argument("--line-ending", help="AUTO, KEEP, LF, CRLF or CR (default: AUTO)")
    parser.add_argument("--source-encoding", help="Encoding of the source files (default: UTF-8)")
    parser.add_argument("--compliance", help="Java compliance level, e.g. 1.8 or 17")
    parser.add_argument("--directory", dest="directories", action="append",
                        help="Source directory relative to the base directory (repeatable)")
    parser.add_argument("--include", dest="includes", action="append",
                        help="Include glob pattern (repeatable, default: **/*.java)")
    parser.add_argument("--exclude", dest="excludes", action="append",
                        help="Exclude glob pattern (repeatable)")
    parser.add_argument("--cache-dir",
                        help="Directory holding the file hash cache, relative to the base "
                             "directory (default: target; '' disables the cache)")
    parser.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Number of parallel jobs (0=auto, 1=sequential, N=parallel)"
    )
    parser.add_argument("--skip", action="store_true", default=None, help="Skip execution")
    parser.add_argument("--backup", action="store_true",
                        help="Write <file>.bak before rewriting a file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only report problems")
    return parser


OPTION_NAMES = [
    "groups", "static_groups", "static_after", "join_static_with_non_static",
    "remove_unused", "treat_same_package_as_unused", "breadth_first_comparator",
    "line_ending", "source_encoding", "compliance", "directories", "includes",
    "excludes", "cache_dir", "jobs", "skip",
]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    config_path = args.config
    if not config_path:
        config_path = find_config_file(args.paths[0] if args.paths else args.base_dir)
    logger.debug(f"Using config: {config_path or 'defaults'}")

    overrides = {name: getattr(args, name) for name in OPTION_NAMES}
    try:
        config = load_config(config_path, overrides)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    summary = run(config, Mode(args.mode), args.paths, args.base_dir, args.backup)
    if summary.failures:
        logger.error(f"{len(summary.failures)} file(s) failed; first failure: {summary.failures[0]}")
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
