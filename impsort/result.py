"""
Outcome of sorting one file, and writing it back out.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, List, Optional, Tuple

from .types import Import

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Result:
    """
    The import section of one file, before and after sorting.

    Attributes:
        path: File the result was computed for (None for in-memory input)
        encoding: Character encoding of the source bytes
        source: The original file bytes
        file_lines: Decoded file lines without their terminators
        start: First line index of the import section (0-based)
        stop: Line index just past the import section
        original_section: Section text as found in the file
        new_section: Canonical section text
        imports: Imports remaining after deduplication and filtering
        eol: Line terminator used for the new section
    """
    EMPTY_FILE: ClassVar["Result"]

    path: Optional[Path]
    encoding: str
    source: bytes
    file_lines: Tuple[str, ...]
    start: int
    stop: int
    original_section: str
    new_section: str
    imports: List[Import] = field(default_factory=list)
    eol: str = "\n"

    @property
    def is_sorted(self) -> bool:
        return self.original_section == self.new_section

    def render(self) -> bytes:
        """Return the full file with the new import section spliced in."""
        if self.is_sorted:
            return self.source

        before = list(self.file_lines[:self.start])
        after = list(self.file_lines[self.stop:])
        section = self.new_section.split(self.eol)
        while section and not section[-1]:
            section.pop()
        if after:
            # restores the blank line dropped with the trailing empty lines
            section.append("")

        lines = before + section + after
        return "".join(line + self.eol for line in lines).encode(self.encoding)

    def save_sorted(self, destination) -> None:
        """
        Write the sorted file to ``destination``.

        A sorted result leaves its own file untouched and copies the original
        bytes anywhere else.
        """
        destination = Path(destination)
        if self.is_sorted and self.path is not None and destination.exists():
            if os.path.samefile(self.path, destination):
                return
        destination.write_bytes(self.render())
        logger.debug(f"Wrote sorted imports to {destination}")

    def save_backup(self, destination) -> None:
        """Write the original bytes to ``destination``."""
        Path(destination).write_bytes(self.source)
        logger.debug(f"Wrote backup to {destination}")


Result.EMPTY_FILE = Result(
    path=None,
    encoding="UTF-8",
    source=b"",
    file_lines=(),
    start=0,
    stop=0,
    original_section="",
    new_section="",
)
