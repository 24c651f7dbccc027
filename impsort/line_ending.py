"""
Line ending detection and resolution.
"""

import os
from enum import Enum
from typing import Optional

from .errors import ImpSortError, Reason


class LineEnding(str, Enum):
    """Line ending styles, plus the AUTO/KEEP configuration choices."""
    AUTO = "AUTO"
    KEEP = "KEEP"
    LF = "LF"
    CRLF = "CRLF"
    CR = "CR"
    UNKNOWN = "UNKNOWN"

    @property
    def chars(self) -> Optional[str]:
        """The characters written for this style, or None for KEEP/UNKNOWN."""
        return _CHARS[self]

    @classmethod
    def from_name(cls, name: str) -> "LineEnding":
        try:
            return cls(str(name).strip().upper())
        except ValueError:
            valid = [e.value for e in cls if e is not cls.UNKNOWN]
            raise ValueError(
                f"Invalid line ending '{name}'. "
                f"Valid values are: {', '.join(valid)}"
            )

    @classmethod
    def determine(cls, text: str) -> "LineEnding":
        """Return the style occurring strictly most often in ``text``.

        A ``\\r\\n`` pair counts only as CRLF. Ties, and text without any
        line terminator, give UNKNOWN.
        """
        crlf = text.count("\r\n")
        cr = text.count("\r") - crlf
        lf = text.count("\n") - crlf

        if lf > cr and lf > crlf:
            return cls.LF
        if crlf > lf and crlf > cr:
            return cls.CRLF
        if cr > lf and cr > crlf:
            return cls.CR
        return cls.UNKNOWN


_CHARS = {
    LineEnding.AUTO: os.linesep,
    LineEnding.KEEP: None,
    LineEnding.LF: "\n",
    LineEnding.CRLF: "\r\n",
    LineEnding.CR: "\r",
    LineEnding.UNKNOWN: None,
}


def resolve_line_ending(configured: LineEnding, text: str, path=None) -> LineEnding:
    """
    Bind the configured line ending for one file.

    Args:
        configured: The configured style (AUTO, KEEP, LF, CRLF or CR)
        text: Decoded file contents, used when ``configured`` is KEEP
        path: File path, reported when detection fails

    Returns:
        One of LF, CRLF, CR or AUTO

    Raises:
        ImpSortError: KEEP was requested and the file has no dominant style
    """
    if configured is LineEnding.KEEP:
        detected = LineEnding.determine(text)
        if detected is LineEnding.UNKNOWN:
            raise ImpSortError(path, Reason.UNKNOWN_LINE_ENDING)
        return detected
    if configured is LineEnding.UNKNOWN:
        raise ValueError("UNKNOWN is not a configurable line ending")
    return configured
