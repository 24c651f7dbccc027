"""
Minimal Javadoc parser.

Splits a Javadoc comment into its main description and its block tags, and
each description into plain text snippets and inline tags such as
``{@link Foo#bar()}``. Only the structure needed to find referenced
identifiers is recovered; HTML and formatting are left untouched.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

# block tags whose first word is a name rather than description text
NAMED_TAGS = frozenset(["param", "throws", "exception"])

_INLINE_TAG = re.compile(r"\{@(\w+)\s*([^}]*)\}")
_BLOCK_TAG = re.compile(r"^@(\w+)\s*(.*)$", re.DOTALL)
_GUTTER = re.compile(r"^\s*\*?\s?")


@dataclass(frozen=True)
class JavadocSnippet:
    text: str

    def to_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class JavadocInlineTag:
    tag_name: str
    content: str

    def to_text(self) -> str:
        return f"{{@{self.tag_name} {self.content}}}"


JavadocElement = Union[JavadocSnippet, JavadocInlineTag]


@dataclass(frozen=True)
class JavadocDescription:
    elements: Tuple[JavadocElement, ...] = ()

    def to_text(self) -> str:
        return "".join(e.to_text() for e in self.elements)

    @classmethod
    def parse_text(cls, text: str) -> "JavadocDescription":
        """Split ``text`` into snippets and inline tags, in order."""
        elements: List[JavadocElement] = []
        index = 0
        for match in _INLINE_TAG.finditer(text):
            if match.start() > index:
                elements.append(JavadocSnippet(text[index:match.start()]))
            elements.append(JavadocInlineTag(match.group(1), match.group(2).strip()))
            index = match.end()
        if index < len(text):
            elements.append(JavadocSnippet(text[index:]))
        return cls(tuple(elements))


@dataclass(frozen=True)
class JavadocBlockTag:
    tag_name: str
    content: JavadocDescription
    name: Optional[str] = None

    def to_text(self) -> str:
        name = f" {self.name}" if self.name else ""
        return f"@{self.tag_name}{name} {self.content.to_text()}"


@dataclass(frozen=True)
class Javadoc:
    description: JavadocDescription
    block_tags: Tuple[JavadocBlockTag, ...] = ()


def _clean_lines(comment_text: str) -> List[str]:
    text = comment_text
    if text.startswith("/**"):
        text = text[3:]
    if text.endswith("*/"):
        text = text[:-2]
    return [_GUTTER.sub("", line, count=1).rstrip() for line in re.split(r"\r\n|\r|\n", text)]


def _block_tag(text: str) -> JavadocBlockTag:
    match = _BLOCK_TAG.match(text)
    tag_name, rest = match.group(1), match.group(2).strip()
    name = None
    if tag_name in NAMED_TAGS and rest:
        parts = rest.split(None, 1)
        name = parts[0]
        rest = parts[1] if len(parts) > 1 else ""
    return JavadocBlockTag(tag_name, JavadocDescription.parse_text(rest), name)


def parse_javadoc(comment_text: str) -> Javadoc:
    """
    Parse the verbatim text of a Javadoc comment.

    Args:
        comment_text: Comment text including the ``/**`` and ``*/`` markers

    Returns:
        Javadoc with its description and block tags
    """
    description_lines: List[str] = []
    tag_chunks: List[List[str]] = []
    for line in _clean_lines(comment_text):
        if _BLOCK_TAG.match(line):
            tag_chunks.append([line])
        elif tag_chunks:
            tag_chunks[-1].append(line)
        else:
            description_lines.append(line)

    description = JavadocDescription.parse_text("\n".join(description_lines).strip())
    block_tags = tuple(_block_tag("\n".join(chunk).strip()) for chunk in tag_chunks)
    return Javadoc(description, block_tags)
