"""
impsort package.

This package sorts the imports of Java source files into user-defined groups,
optionally removing unused imports, using a Tree-sitter Java parser.
"""

from .types import Import, Group, Position, WILDCARD

from .errors import (
    ImpSortError, Reason, InvalidGroupError, DuplicateGroupError,
    InternalError, ImportsNotSortedError
)

from .line_ending import LineEnding, resolve_line_ending

from .grouper import Grouper, parse_groups, depth_first, breadth_first

from .result import Result

from .sorter import ImpSort

from .config import (
    ImpSortConfig, load_config, get_default_config, save_config, find_config_file
)

__all__ = [
    # Types
    "Import", "Group", "Position", "WILDCARD",

    # Errors
    "ImpSortError", "Reason", "InvalidGroupError", "DuplicateGroupError",
    "InternalError", "ImportsNotSortedError",

    # Sorting
    "LineEnding", "resolve_line_ending", "Grouper", "parse_groups",
    "depth_first", "breadth_first", "Result", "ImpSort",

    # Config
    "ImpSortConfig", "load_config", "get_default_config", "save_config", "find_config_file"
]
