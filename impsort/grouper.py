"""
Import grouping and ordering.

Groups are written as a comma-separated list of package prefixes, e.g.
``"java.,javax.,org.,com."``. The special ``*`` group catches every import
not matched by a more specific prefix and is appended when omitted. Imports
are emitted group by group, in the order the user wrote the groups, and are
sorted within each group.
"""

import re
from functools import cmp_to_key
from typing import Callable, Dict, Iterable, List

from .errors import DuplicateGroupError, InvalidGroupError
from .types import WILDCARD, Group, Import


_VALID_GROUP = re.compile(r"^(?:\w+(?:[.]\w+)*[.]?|[*])$", re.ASCII)

Comparator = Callable[[Import, Import], int]


def parse_groups(spec: str) -> List[Group]:
    """
    Parse a group spec into the list searched when assigning imports.

    Args:
        spec: Comma-separated prefixes; whitespace is ignored

    Returns:
        Groups ordered by descending prefix length (ties keep the order they
        were written in), with the ``*`` group always searched last

    Raises:
        InvalidGroupError: A token is neither a dotted prefix nor ``*``
        DuplicateGroupError: A prefix appears more than once
    """
    if spec is None:
        raise ValueError("Group spec must not be None")

    tokens = re.sub(r"\s+", "", spec).split(",")
    # a trailing separator does not introduce an empty group
    while tokens and not tokens[-1]:
        tokens.pop()

    groups: List[Group] = []
    seen = set()
    for token in tokens:
        if not _VALID_GROUP.match(token):
            raise InvalidGroupError(token, spec)
        if token in seen:
            raise DuplicateGroupError(token, spec)
        seen.add(token)
        groups.append(Group(token, len(groups)))

    if WILDCARD not in seen:
        groups.append(Group(WILDCARD, len(groups)))

    # sorted() is stable, so equal lengths stay in encounter order
    return sorted(groups, key=lambda g: (g.is_wildcard, -len(g.prefix)))


def _compare(a, b) -> int:
    return (a > b) - (a < b)


def depth_first(a: Import, b: Import) -> int:
    """Plain lexicographic order on the dotted path."""
    return _compare(a.path, b.path)


def breadth_first(a: Import, b: Import) -> int:
    """Order shorter paths before their nested extensions.

    All members of a class sort before any member of one of its nested
    classes: ``p.C.b`` comes before ``p.C.A.a``.
    """
    a_segments = a.path.split(".")
    b_segments = b.path.split(".")
    for a_seg, b_seg in zip(a_segments, b_segments):
        if a_seg != b_seg:
            if len(a_segments) != len(b_segments):
                return _compare(len(a_segments), len(b_segments))
            return _compare(a_seg, b_seg)
    return _compare(len(a_segments), len(b_segments))


class Grouper:
    """Partitions imports into groups and renders the canonical section."""

    def __init__(self, groups: str = WILDCARD, static_groups: str = WILDCARD,
                 static_after: bool = False, join_static_with_non_static: bool = False,
                 breadth_first_comparator: bool = True):
        self.groups = tuple(parse_groups(groups))
        self.static_groups = tuple(parse_groups(static_groups))
        self.static_after = static_after
        self.join_static_with_non_static = join_static_with_non_static
        self.breadth_first_comparator = breadth_first_comparator

    @property
    def comparator(self) -> Comparator:
        return breadth_first if self.breadth_first_comparator else depth_first

    def group_non_static(self, imports: Iterable[Import]) -> Dict[int, List[Import]]:
        return self._group(imports, self.groups, static=False)

    def group_static(self, imports: Iterable[Import]) -> Dict[int, List[Import]]:
        return self._group(imports, self.static_groups, static=True)

    def _group(self, imports: Iterable[Import], groups, static: bool) -> Dict[int, List[Import]]:
        buckets: Dict[int, List[Import]] = {}
        for imp in imports:
            if imp.is_static != static:
                continue
            # the wildcard group is last, so a match is always found
            group = next(g for g in groups if g.matches(imp.path))
            buckets.setdefault(group.order, []).append(imp)

        key = cmp_to_key(self.comparator)
        return {order: sorted(buckets[order], key=key) for order in sorted(buckets)}

    def grouped_imports(self, imports: Iterable[Import], eol: str = "\n") -> str:
        """
        Render the import section body.

        Args:
            imports: Deduplicated imports to emit
            eol: Line terminator written after every line

        Returns:
            The section text; every line, including the last, ends with ``eol``
        """
        imports = list(imports)
        static = self.group_static(imports)
        non_static = self.group_non_static(imports)
        first, second = (non_static, static) if self.static_after else (static, non_static)

        parts: List[str] = []
        self._emit(parts, first, eol)
        if not self.join_static_with_non_static and first and second:
            parts.append(eol)
        self._emit(parts, second, eol)
        return "".join(parts)

    @staticmethod
    def _emit(parts: List[str], buckets: Dict[int, List[Import]], eol: str) -> None:
        for index, bucket in enumerate(buckets.values()):
            if index > 0:
                parts.append(eol)
            for imp in bucket:
                parts.append(imp.to_text(eol))
                parts.append(eol)
