"""
Java language adapter for tree-sitter.

Parses Java source with the tree-sitter-java grammar and reduces the tree to
the parts of a compilation unit the import sorter works with: the package
declaration, the import declarations, the top-level comments (attributed to
the declarations they belong to, or left as orphans), every comment in the
file, the top-level type declarations with their tokens, and any syntax
problems found by the parser.
"""

import logging
import re
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .types import Position

logger = logging.getLogger(__name__)

COMMENT_TYPES = frozenset(["line_comment", "block_comment", "comment"])
TYPE_DECLARATION_TYPES = frozenset([
    "class_declaration",
    "interface_declaration",
    "enum_declaration",
    "annotation_type_declaration",
    "record_declaration",
])
DECLARATION_TYPES = TYPE_DECLARATION_TYPES | {
    "package_declaration", "import_declaration", "module_declaration"
}
# literals are single tokens even though the grammar gives them children
ATOMIC_TYPES = frozenset(["string_literal", "character_literal", "text_block"])
NAME_TYPES = frozenset(["identifier", "scoped_identifier"])

UNIT_BEGIN = Position(1, 1)

LINE, BLOCK, JAVADOC = "line", "block", "javadoc"


@dataclass(frozen=True)
class Comment:
    """A comment with its verbatim text."""
    kind: str  # "line", "block" or "javadoc"
    text: str
    begin: Position
    end: Position

    @property
    def is_line_comment(self) -> bool:
        return self.kind == LINE


@dataclass(frozen=True)
class PackageDeclaration:
    name: str
    begin: Position
    end: Position
    annotation_tokens: Tuple[str, ...] = ()
    comment: Optional[Comment] = None


@dataclass(frozen=True)
class ImportDeclaration:
    is_static: bool
    name: str
    is_asterisk: bool
    begin: Position
    end: Position
    comment: Optional[Comment] = None

    @property
    def path(self) -> str:
        return self.name + ".*" if self.is_asterisk else self.name


@dataclass(frozen=True)
class TypeDeclaration:
    kind: str
    begin: Position
    end: Position
    tokens: Tuple[str, ...] = ()
    comment: Optional[Comment] = None


@dataclass(frozen=True)
class Problem:
    message: str
    begin: Position

    def __str__(self) -> str:
        return f"{self.message} ({self.begin})"


@dataclass(frozen=True)
class CompilationUnit:
    """The parts of a parsed Java file used by the import sorter."""
    package: Optional[PackageDeclaration]
    imports: List[ImportDeclaration] = field(default_factory=list)
    types: List[TypeDeclaration] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    orphan_comments: List[Comment] = field(default_factory=list)
    problems: List[Problem] = field(default_factory=list)
    begin: Position = UNIT_BEGIN

    @property
    def first_type_begin(self) -> Optional[Position]:
        return min((t.begin for t in self.types), default=None)

    def import_relevant_problems(self) -> List[Problem]:
        """Problems located before the first top-level type declaration.

        Problems after it are most likely newer syntax in the type bodies,
        which does not affect the import section. Without any type
        declaration every problem is relevant.
        """
        first = self.first_type_begin
        if first is None:
            return list(self.problems)
        return [p for p in self.problems if p.begin < first]


def normalize_language_level(compliance: Optional[str]) -> str:
    """
    Convert a compiler compliance setting to a language level name.

    Examples: ``"1.4"`` -> ``JAVA_1_4``, ``"1.8"`` -> ``JAVA_8``,
    ``"17"`` -> ``JAVA_17``, empty -> ``POPULAR``.
    """
    if compliance is None or not str(compliance).strip():
        return "POPULAR"
    value = str(compliance).strip()
    if re.match(r"^1[.][01234]$", value):
        return "JAVA_" + value.replace(".", "_")
    if re.match(r"^1[.][56789]$", value):
        return "JAVA_" + value.split(".", 1)[1]
    if not re.match(r"^\w+$", value):
        raise ValueError(f"Invalid compliance level '{compliance}'")
    return "JAVA_" + value.upper()


def _position(point) -> Position:
    return Position(point[0] + 1, point[1] + 1)


def _text(node) -> str:
    return node.text.decode("utf-8")


def _comment_kind(text: str) -> str:
    if text.startswith("//"):
        return LINE
    # "/**/" is an empty block comment, not a Javadoc comment
    if text.startswith("/**") and text != "/**/":
        return JAVADOC
    return BLOCK


def _make_comment(node) -> Comment:
    text = _text(node)
    return Comment(_comment_kind(text), text, _position(node.start_point), _position(node.end_point))


def _iter_nodes(root) -> Iterator[Any]:
    """Pre-order walk without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _tokens(root) -> List[str]:
    """Leaf token texts under ``root``, skipping comments."""
    tokens = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in COMMENT_TYPES:
            continue
        if node.type in ATOMIC_TYPES or not node.children:
            tokens.append(_text(node))
        else:
            stack.extend(reversed(node.children))
    return tokens


def _dotted_name(node) -> str:
    return ".".join(_text(n) for n in _iter_nodes(node) if n.type == "identifier")


def _name_child(node):
    for child in node.children:
        if child.type in NAME_TYPES:
            return child
    return None


def _problems(root) -> List[Problem]:
    problems = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_missing:
            problems.append(Problem(f"Missing '{node.type}'", _position(node.start_point)))
            continue
        if node.type == "ERROR":
            problems.append(Problem("Unexpected syntax", _position(node.start_point)))
            continue
        if node.has_error:
            stack.extend(reversed(node.children))
    return sorted(problems, key=lambda p: p.begin)


def _lines_between(comment: Comment, begin: Position) -> bool:
    return begin.line > comment.end.line + 1


def attribute_comments(nodes: List[Tuple[Position, Position]],
                       comments: List[Comment]) -> Tuple[Dict[int, Comment], List[Comment]]:
    """
    Attach top-level comments to the top-level declarations they describe.

    Args:
        nodes: (begin, end) of each top-level declaration, in file order
        comments: Top-level comments, in file order

    Returns:
        Tuple of (declaration index -> attached comment, orphan comments)
    """
    attached: Dict[int, Comment] = {}
    remaining = []

    # a line comment trailing a declaration on its own line belongs to it
    for comment in comments:
        taken = False
        if comment.is_line_comment:
            for index, (begin, end) in enumerate(nodes):
                if end.line != comment.begin.line:
                    continue
                if begin.line == comment.begin.line:
                    if index not in attached:
                        attached[index] = comment
                        taken = True
                        break
                else:
                    # ends a multi-line declaration; it goes to a nested node
                    taken = True
                    break
        if not taken:
            remaining.append(comment)

    # otherwise a comment directly above a declaration belongs to it
    things = [(begin, 0, index) for index, (begin, _) in enumerate(nodes)]
    things += [(c.begin, 1, i) for i, c in enumerate(remaining)]
    things.sort()

    previous: Optional[Comment] = None
    used = set()
    for begin, is_comment, index in things:
        if is_comment:
            previous = remaining[index]
        elif previous is not None and index not in attached:
            if not _lines_between(previous, begin):
                attached[index] = previous
                used.add(id(previous))
                previous = None

    orphans = [c for c in remaining if id(c) not in used]
    return attached, orphans


class JavaAdapter:
    """Tree-sitter adapter for the Java language."""

    def __init__(self, language_level: Optional[str] = None):
        # tree-sitter parsers must not be shared between threads
        self._local = threading.local()
        self.language_level = language_level or "POPULAR"

    def _get_parser(self):
        """Get or create the tree-sitter parser of the current thread."""
        parser = getattr(self._local, "parser", None)
        if parser is None:
            try:
                import tree_sitter
                from tree_sitter_java import language

                JAVA_LANGUAGE = tree_sitter.Language(language())

                parser = tree_sitter.Parser()
                parser.language = JAVA_LANGUAGE
                self._local.parser = parser
                logger.debug(f"Java parser initialized (language level {self.language_level})")
            except ImportError as e:
                logger.warning(f"tree-sitter-java not available: {e}")
                return None

        return parser

    def parse(self, text: str) -> Any:
        """Parse text and return a tree-sitter tree, or None without a parser."""
        parser = self._get_parser()
        if parser is None:
            return None
        return parser.parse(text.encode("utf-8"))

    def compilation_unit(self, text: str) -> Optional[CompilationUnit]:
        """
        Parse ``text`` into a CompilationUnit.

        Returns:
            The unit, or None when no usable tree could be produced (no
            parser, or nothing but syntax errors at the top level)
        """
        tree = self.parse(text)
        if tree is None:
            return None
        root = tree.root_node
        if root.has_error and not any(c.type in DECLARATION_TYPES for c in root.children):
            return None
        return self._build_unit(root)

    def _build_unit(self, root) -> CompilationUnit:
        top_comments: List[Comment] = []
        declarations: List[Any] = []

        for child in root.children:
            if child.type in COMMENT_TYPES:
                top_comments.append(_make_comment(child))
            elif child.type == "package_declaration":
                declarations.append(self._package(child))
            elif child.type == "import_declaration":
                declarations.append(self._import(child))
            elif child.type in TYPE_DECLARATION_TYPES:
                declarations.append(TypeDeclaration(
                    child.type, _position(child.start_point),
                    _position(child.end_point), tuple(_tokens(child))))

        attached, orphans = attribute_comments([(d.begin, d.end) for d in declarations], top_comments)
        declarations = [
            replace(d, comment=attached[i]) if i in attached else d
            for i, d in enumerate(declarations)
        ]
        package = next((d for d in declarations if isinstance(d, PackageDeclaration)), None)
        imports = [d for d in declarations if isinstance(d, ImportDeclaration)]
        types = [d for d in declarations if isinstance(d, TypeDeclaration)]

        comments = [_make_comment(n) for n in _iter_nodes(root) if n.type in COMMENT_TYPES]

        return CompilationUnit(
            package=package,
            imports=imports,
            types=types,
            comments=comments,
            orphan_comments=orphans,
            problems=_problems(root) if root.has_error else [],
        )

    @staticmethod
    def _package(node) -> PackageDeclaration:
        name_node = _name_child(node)
        annotation_tokens = []
        for child in node.children:
            if child.type in ("annotation", "marker_annotation"):
                annotation_tokens.extend(_tokens(child))
        return PackageDeclaration(
            name=_dotted_name(name_node) if name_node is not None else "",
            begin=_position(node.start_point),
            end=_position(node.end_point),
            annotation_tokens=tuple(annotation_tokens),
        )

    @staticmethod
    def _import(node) -> ImportDeclaration:
        name_node = _name_child(node)
        child_types = {c.type for c in node.children}
        return ImportDeclaration(
            is_static="static" in child_types,
            name=_dotted_name(name_node) if name_node is not None else "",
            is_asterisk="asterisk" in child_types,
            begin=_position(node.start_point),
            end=_position(node.end_point),
        )
