"""
File discovery filters for impsort.

Decides which files under a source directory are sorted, based on:
- Include/exclude glob patterns relative to the directory
- Version control, IDE and build directories that are never entered

Patterns use ``/`` separators; ``*`` and ``?`` stay within one path segment
and ``**`` crosses directories. Matching is case-insensitive.

Usage:
    from impsort.file_filter import find_files

    for path in find_files("src/main/java", ["**/*.java"], ["**/generated/**"]):
        ...
"""

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Iterable, List, Pattern


# ============================================================================
# EXCLUDED DIRECTORIES
# ============================================================================
# Never descended into during discovery.
EXCLUDED_DIRS: FrozenSet[str] = frozenset([
    # Version control
    ".git",
    ".svn",
    ".hg",

    # IDE / editor
    ".idea",
    ".vscode",
    ".settings",

    # Build tools
    ".gradle",
    ".mvn",
    "target",
    "node_modules",
])


@lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> Pattern[str]:
    """Translate a glob pattern into an anchored regex."""
    regex = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            regex.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            regex.append(".*")
            i += 2
        elif pattern[i] == "*":
            regex.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            regex.append("[^/]")
            i += 1
        else:
            regex.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(regex) + "$", re.IGNORECASE)


def matches_pattern(relative_path: str, pattern: str) -> bool:
    """Check a ``/``-separated relative path against one glob pattern."""
    return bool(_compile_glob(pattern.replace("\\", "/")).match(relative_path))


def is_included(relative_path: str, includes: Iterable[str], excludes: Iterable[str]) -> bool:
    relative_path = relative_path.replace("\\", "/")
    if not any(matches_pattern(relative_path, p) for p in includes):
        return False
    return not any(matches_pattern(relative_path, p) for p in excludes)


def is_excluded_dir(name: str) -> bool:
    return name in EXCLUDED_DIRS


def find_files(directory, includes: Iterable[str], excludes: Iterable[str]) -> List[Path]:
    """
    Find files under ``directory`` selected by the include and exclude patterns.

    Args:
        directory: Root of the walk; patterns are relative to it
        includes: A file must match at least one of these
        excludes: A file must match none of these

    Returns:
        Sorted list of matching file paths
    """
    root = Path(directory)
    includes = list(includes)
    excludes = list(excludes)
    found = []
    for current, dirs, files in os.walk(root):
        dirs[:] = sorted(d for d in dirs if not is_excluded_dir(d))
        for name in files:
            path = Path(current) / name
            if is_included(path.relative_to(root).as_posix(), includes, excludes):
                found.append(path)
    return sorted(found)
