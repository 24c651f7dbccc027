"""
Exceptions raised by the impsort engine.
"""

from enum import Enum


class Reason(str, Enum):
    """Why a single file could not be processed."""
    UNKNOWN_LINE_ENDING = "unknown line ending"
    UNABLE_TO_PARSE = "unable to successfully parse the Java file"
    PARTIAL_PARSE = "the Java file contained parse errors"

    def __str__(self) -> str:
        return self.value


class ImpSortError(Exception):
    """A file could not be sorted; carries the file path and the reason."""

    def __init__(self, path, reason: Reason):
        super().__init__(f"file: {path}; reason: {reason}")
        self.path = path
        self.reason = reason


class InvalidGroupError(ValueError):
    """A group spec token is not a dotted prefix or ``*``."""

    def __init__(self, group: str, spec: str):
        super().__init__(f"Invalid group ({group}) in ({spec})")
        self.group = group
        self.spec = spec


class DuplicateGroupError(ValueError):
    """The same group prefix was listed twice."""

    def __init__(self, group: str, spec: str):
        super().__init__(f"Duplicate group ({group}) in ({spec})")
        self.group = group
        self.spec = spec


class InternalError(RuntimeError):
    """The parse tree violated an assumption of the import-section transformer."""


class ImportsNotSortedError(Exception):
    """Raised by the check mode for a file whose imports are not canonical."""

    def __init__(self, path):
        super().__init__(f"Imports are not sorted in {path}")
        self.path = path
