"""
Core types for the impsort engine.

This module provides the immutable values shared by the parser adapter,
the import-section transformer and the driver.
"""

from dataclasses import dataclass
from typing import NamedTuple, Tuple


WILDCARD = "*"


class Position(NamedTuple):
    """A 1-based (line, column) location in a source file."""
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Import:
    """One import declaration together with the comments attached to it.

    Attributes:
        is_static: Whether this is an ``import static`` declaration
        path: Dotted name being imported; may end with ``.*``
        prefix: Comments written before the import line (possibly multi-line)
        suffix: Trailing same-line comment, starting with one space when set
    """
    is_static: bool
    path: str
    prefix: str = ""
    suffix: str = ""

    @property
    def key(self) -> Tuple[bool, str]:
        """Identity used when merging duplicates; comments are ignored."""
        return (self.is_static, self.path)

    @property
    def last_segment(self) -> str:
        return self.path.rsplit(".", 1)[-1]

    def combine_with(self, other: "Import", eol: str = "\n") -> "Import":
        """Merge a duplicate of this import, keeping the comments of both."""
        prefix = eol.join(p for p in (self.prefix, other.prefix) if p)
        suffix = "".join(s for s in (self.suffix, other.suffix) if s)
        return Import(self.is_static, self.path, prefix, suffix)

    def to_text(self, eol: str = "\n") -> str:
        static = " static" if self.is_static else ""
        head = self.prefix + eol if self.prefix else ""
        return f"{head}import{static} {self.path};{self.suffix}"

    def __str__(self) -> str:
        return self.to_text()


@dataclass(frozen=True)
class Group:
    """A prefix rule selecting which bucket an import is emitted in.

    ``order`` is the zero-based position at which the user wrote the group.
    """
    prefix: str
    order: int

    def __post_init__(self):
        if self.order < 0:
            raise ValueError("Encounter order cannot be negative")

    @property
    def is_wildcard(self) -> bool:
        return self.prefix == WILDCARD

    def matches(self, path: str) -> bool:
        return self.is_wildcard or path.startswith(self.prefix)
