"""
Import-section transformer.

Locates the import section of a parsed Java file, converts it into Import
values with their comments, optionally removes unused and same-package
imports, and renders the canonical section with the grouper.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from .errors import ImpSortError, InternalError, Reason
from .grouper import Grouper
from .java_adapter import (
    JAVADOC,
    Comment,
    CompilationUnit,
    ImportDeclaration,
    JavaAdapter,
    PackageDeclaration,
)
from .javadoc import JavadocInlineTag, parse_javadoc
from .line_ending import LineEnding, resolve_line_ending
from .result import Result
from .types import WILDCARD, Import

logger = logging.getLogger(__name__)

SectionNode = Union[Comment, ImportDeclaration]

_LINE_SPLIT = re.compile(r"\r\n|\r|\n")
# Java's \W is ASCII only
_NON_WORD = re.compile(r"\W+", re.ASCII)


def split_lines(text: str) -> List[str]:
    """Split text into lines on any terminator; a final terminator ends the last line."""
    lines = _LINE_SPLIT.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def is_java_identifier_start(token: str) -> bool:
    return bool(token) and (token[0] == "$" or token[0].isidentifier())


class ImpSort:
    """
    Sorts the imports of Java source files.

    Example:
        sorter = ImpSort(grouper=Grouper("java.,javax.,org.,com."), remove_unused=True)
        result = sorter.parse_file("Foo.java")
        if not result.is_sorted:
            result.save_sorted("Foo.java")
    """

    def __init__(self, source_encoding: str = "UTF-8", grouper: Optional[Grouper] = None,
                 remove_unused: bool = False, treat_same_package_as_unused: bool = True,
                 line_ending: LineEnding = LineEnding.AUTO, language_level: Optional[str] = None):
        self.source_encoding = source_encoding
        self.grouper = grouper or Grouper()
        self.remove_unused = remove_unused
        self.treat_same_package_as_unused = treat_same_package_as_unused
        self.line_ending = line_ending
        self.adapter = JavaAdapter(language_level)

    @classmethod
    def from_config(cls, config) -> "ImpSort":
        """Build a sorter from an ImpSortConfig."""
        grouper = Grouper(
            groups=config.groups,
            static_groups=config.static_groups,
            static_after=config.static_after,
            join_static_with_non_static=config.join_static_with_non_static,
            breadth_first_comparator=config.breadth_first_comparator,
        )
        return cls(
            source_encoding=config.source_encoding,
            grouper=grouper,
            remove_unused=config.remove_unused,
            treat_same_package_as_unused=config.treat_same_package_as_unused,
            line_ending=config.line_ending,
            language_level=config.language_level,
        )

    def parse_file(self, path, data: Optional[bytes] = None) -> Result:
        """
        Compute the sorted import section of one file.

        Args:
            path: The file; read from disk unless ``data`` is given
            data: File contents, when already in memory

        Returns:
            Result for the file, or Result.EMPTY_FILE for an empty file

        Raises:
            ImpSortError: Unknown line ending under KEEP, or unparseable input
            OSError: The file could not be read
        """
        path = Path(path)
        if data is None:
            data = path.read_bytes()
        if not data:
            logger.debug(f"{path} is empty")
            return Result.EMPTY_FILE

        text = data.decode(self.source_encoding)
        eol = resolve_line_ending(self.line_ending, text, path).chars
        file_lines = split_lines(text)

        unit = self.adapter.compilation_unit("\n".join(file_lines))
        if unit is None:
            raise ImpSortError(path, Reason.UNABLE_TO_PARSE)
        problems = unit.import_relevant_problems()
        if problems:
            for problem in problems:
                logger.debug(f"{path}: {problem}")
            raise ImpSortError(path, Reason.PARTIAL_PARSE)

        def make_result(start, stop, original_section, new_section, imports):
            return Result(path, self.source_encoding, data, tuple(file_lines), start, stop,
                          original_section, new_section, imports, eol)

        if not unit.imports:
            return make_result(0, len(file_lines), "", "", [])

        nodes = self.import_section_nodes(unit)
        start, stop = self.locate_section(nodes, file_lines)
        logger.debug(f"{path}: import section spans lines {start + 1}-{stop}")
        original_section = eol.join(file_lines[start:stop]) + eol

        imports = self.convert_import_section(nodes, eol)
        if self.remove_unused:
            remove_unused_imports(imports, tokens_in_use(unit))
            if self.treat_same_package_as_unused:
                remove_same_package_imports(imports, unit.package)

        new_section = self.grouper.grouped_imports(imports.values(), eol)
        if start > 0:
            # not at the start of the file
            new_section = eol + new_section
        if stop < len(file_lines):
            # more follows in the file
            new_section += eol

        return make_result(start, stop, original_section, new_section, list(imports.values()))

    @staticmethod
    def import_section_nodes(unit: CompilationUnit) -> List[SectionNode]:
        """Imports plus the orphan comments between the package and the last import."""
        package_pos = unit.package.end if unit.package is not None else unit.begin
        last_import_pos = max(i.begin for i in unit.imports)
        orphans = [c for c in unit.orphan_comments if package_pos < c.begin < last_import_pos]
        return sorted(orphans + list(unit.imports), key=lambda n: n.begin)

    @staticmethod
    def locate_section(nodes: List[SectionNode], file_lines: List[str]) -> Tuple[int, int]:
        """Return the 0-based, half-open line range of the section, with blank padding."""
        first, last = nodes[0], nodes[-1]
        begin = first.begin
        if isinstance(first, ImportDeclaration) and first.comment is not None:
            begin = min(begin, first.comment.begin)
        start = begin.line - 1
        stop = last.end.line

        while start > 0 and not file_lines[start - 1].strip():
            start -= 1
        while stop < len(file_lines) and not file_lines[stop].strip():
            stop += 1
        return start, stop

    @staticmethod
    def convert_import_section(nodes: Iterable[SectionNode], eol: str = "\n") -> Dict[Tuple[bool, str], Import]:
        """
        Convert section nodes to Imports in file order, merging duplicates.

        Floating comments become part of the prefix of the next import; the
        comment attached to an import goes on whichever side of it it was
        written.

        Raises:
            InternalError: Comments were left over after the last import
        """
        imports: Dict[Tuple[bool, str], Import] = {}
        recent: List[Comment] = []
        for node in nodes:
            if isinstance(node, Comment):
                recent.append(node)
                continue

            before = list(recent)
            after: List[Comment] = []
            if node.comment is not None:
                if node.comment.begin < node.begin:
                    before.append(node.comment)
                else:
                    after.append(node.comment)
            recent.clear()

            imp = _make_import(node, before, after, eol)
            previous = imports.pop(imp.key, None)
            if previous is not None:
                logger.debug(f"Merging duplicate import {imp.path}")
                imp = previous.combine_with(imp, eol)
            imports[imp.key] = imp

        if recent:
            raise InternalError(f"Unexpectedly found more orphaned comments: {recent}")
        return imports


def _comment_text(comment: Comment, eol: str) -> str:
    return comment.text.replace("\n", eol)


def _make_import(decl: ImportDeclaration, before: List[Comment], after: List[Comment], eol: str) -> Import:
    prefix = eol.join(_comment_text(c, eol) for c in before).rstrip()
    suffix = "".join(_comment_text(c, eol) for c in after).strip()
    if suffix:
        suffix = " " + suffix
    return Import(decl.is_static, decl.path, prefix, suffix)


def tokens_in_use(unit: CompilationUnit) -> Set[str]:
    """
    Collect every identifier-like token a file's body refers to.

    Sources are the package annotations, all tokens of the top-level type
    declarations, and the text of every Javadoc comment (descriptions, inline
    tags and block tags, split on non-word characters).
    """
    tokens: List[str] = []
    if unit.package is not None:
        tokens.extend(unit.package.annotation_tokens)
    for decl in unit.types:
        tokens.extend(decl.tokens)

    for comment in unit.comments:
        if comment.kind != JAVADOC:
            continue
        javadoc = parse_javadoc(comment.text)
        descriptions = [javadoc.description]
        descriptions.extend(tag.content for tag in javadoc.block_tags)
        # the full text of every block tag counts, so @throws/@exception
        # names are seen; @param names come along with them
        texts = [tag.to_text() for tag in javadoc.block_tags]
        for description in descriptions:
            for element in description.elements:
                if isinstance(element, JavadocInlineTag):
                    texts.append(element.content)
                else:
                    texts.append(element.to_text())
        for text in texts:
            tokens.extend(_NON_WORD.split(text))

    return {t for t in tokens if is_java_identifier_start(t)}


def remove_unused_imports(imports: Dict[Tuple[bool, str], Import], in_use: Set[str]) -> None:
    """Drop imports whose last path segment is not in ``in_use``; star imports stay."""
    for key, imp in list(imports.items()):
        if not imp.path:
            raise InternalError("Parse tree includes invalid import statements")
        segment = imp.last_segment
        if segment == WILDCARD:
            continue
        if segment not in in_use:
            logger.debug(f"Removing unused import {imp.path}")
            del imports[key]


def remove_same_package_imports(imports: Dict[Tuple[bool, str], Import],
                                package: Optional[PackageDeclaration]) -> None:
    """Drop imports of types that live directly in the file's own package."""
    package_name = package.name if package is not None else ""
    for key, imp in list(imports.items()):
        path = imp.path
        if not package_name:
            same = "." not in path
        else:
            same = path.startswith(package_name) and path.rfind(".") <= len(package_name)
        if same:
            logger.debug(f"Removing same-package import {path}")
            del imports[key]
