"""Tests for the import-section transformer."""

from pathlib import Path

import pytest

from impsort.errors import ImpSortError, Reason
from impsort.grouper import Grouper
from impsort.java_adapter import PackageDeclaration
from impsort.line_ending import LineEnding
from impsort.result import Result
from impsort.sorter import (
    ImpSort,
    remove_same_package_imports,
    remove_unused_imports,
    split_lines,
)
from impsort.types import Import, Position

FIXTURES = Path(__file__).parent / "fixtures"


def _sorter(**kwargs):
    kwargs.setdefault("line_ending", LineEnding.LF)
    return ImpSort(**kwargs)


def _imports(*paths):
    return {(False, p): Import(False, p) for p in paths}


class TestParseFile:
    """Test cases for ImpSort.parse_file."""

    def test_sorts_into_groups(self):
        source = (
            b"package p;\n"
            b"\n"
            b"import org.X;\n"
            b"import java.util.Map;\n"
            b"import com.Y;\n"
            b"import java.util.List;\n"
            b"\n"
            b"public class A {}\n"
        )
        sorter = _sorter(grouper=Grouper("java.,javax.,org.,com."))
        result = sorter.parse_file("A.java", source)

        assert not result.is_sorted
        assert (result.start, result.stop) == (1, 7)
        assert result.new_section == (
            "\n"
            "import java.util.List;\n"
            "import java.util.Map;\n"
            "\n"
            "import org.X;\n"
            "\n"
            "import com.Y;\n"
            "\n"
        )
        assert result.render() == (
            b"package p;\n"
            b"\n"
            b"import java.util.List;\n"
            b"import java.util.Map;\n"
            b"\n"
            b"import org.X;\n"
            b"\n"
            b"import com.Y;\n"
            b"\n"
            b"public class A {}\n"
        )

    def test_sorted_output_is_fixed_point(self):
        source = (
            b"package p;\n"
            b"import static x.Y.z;\n"
            b"import b.B; // bee\n"
            b"// about a\n"
            b"import a.A;\n"
            b"import b.B;\n"
            b"class C {}\n"
        )
        sorter = _sorter(grouper=Grouper("a.,b."))
        first = sorter.parse_file("C.java", source)
        output = first.render()

        second = sorter.parse_file("C.java", output)
        assert second.is_sorted
        assert second.new_section == first.new_section
        assert second.render() == output

    def test_comments_follow_their_imports(self):
        source = (
            b"import b.B; // bee\n"
            b"// about a\n"
            b"import a.A;\n"
            b"class X { A a; B b; }\n"
        )
        result = _sorter().parse_file("X.java", source)
        assert result.render() == (
            b"// about a\n"
            b"import a.A;\n"
            b"import b.B; // bee\n"
            b"\n"
            b"class X { A a; B b; }\n"
        )

    def test_orphan_comment_becomes_prefix(self):
        source = (
            b"package p;\n"
            b"\n"
            b"import a.A;\n"
            b"\n"
            b"// orphan\n"
            b"\n"
            b"import b.B;\n"
            b"\n"
            b"class X {}\n"
        )
        result = _sorter().parse_file("X.java", source)
        assert result.new_section == "\nimport a.A;\n// orphan\nimport b.B;\n\n"

    def test_duplicates_are_merged(self):
        source = b"import a.A;\nimport b.B;\nimport a.A;\nclass X {}\n"
        result = _sorter().parse_file("X.java", source)
        assert [i.path for i in result.imports] == ["b.B", "a.A"]
        assert result.new_section == "import a.A;\nimport b.B;\n\n"

    def test_lines_outside_section_preserved(self):
        source = (
            b"// header\n"
            b"package p;\n"
            b"\n"
            b"import org.X;\n"
            b"import java.util.List;\n"
            b"\n"
            b"class X { List l; X x; }\n"
            b"\n"
            b"\n"
        )
        sorter = _sorter(grouper=Grouper("java.,javax.,org.,com."))
        result = sorter.parse_file("X.java", source)

        assert not result.is_sorted
        assert list(result.file_lines) == source.decode("utf-8").split("\n")[:-1]
        assert (result.start, result.stop) == (2, 6)

        rendered = result.render()
        assert rendered.endswith(b"class X { List l; X x; }\n\n\n")
        lines = split_lines(rendered.decode("utf-8"))
        tail = len(result.file_lines) - result.stop
        assert lines[:result.start] == list(result.file_lines[:result.start])
        assert lines[-tail:] == list(result.file_lines[result.stop:])
        assert lines[result.start:-tail] == ["", "import java.util.List;", "", "import org.X;", ""]

    def test_trailing_blank_lines_after_imports(self):
        result = _sorter().parse_file("X.java", b"import b.B;\nimport a.A;\n\n\n")
        assert (result.start, result.stop) == (0, 4)
        assert result.render() == b"import a.A;\nimport b.B;\n"

    def test_imports_at_end_of_file(self):
        result = _sorter().parse_file("X.java", b"package p;\nimport b.B;\nimport a.A;")
        assert result.stop == len(result.file_lines)
        assert result.new_section == "\nimport a.A;\nimport b.B;\n"
        assert result.render() == b"package p;\n\nimport a.A;\nimport b.B;\n"

    def test_keep_preserves_crlf(self):
        source = b"package p;\r\n\r\nimport b.B;\r\nimport a.A;\r\n\r\nclass X {}\r\n"
        result = _sorter(line_ending=LineEnding.KEEP).parse_file("X.java", source)
        output = result.render()
        assert output == b"package p;\r\n\r\nimport a.A;\r\nimport b.B;\r\n\r\nclass X {}\r\n"
        assert b"\n" not in output.replace(b"\r\n", b"")

    def test_keep_without_line_ending_fails(self):
        with pytest.raises(ImpSortError) as exc_info:
            _sorter(line_ending=LineEnding.KEEP).parse_file("X.java", b"import a.A;")
        assert exc_info.value.reason == Reason.UNKNOWN_LINE_ENDING

    def test_partial_parse(self):
        source = b"import a.B;\n%%%\nimport c.D;\nclass X {}\n"
        with pytest.raises(ImpSortError) as exc_info:
            _sorter().parse_file("X.java", source)
        assert exc_info.value.reason == Reason.PARTIAL_PARSE
        assert exc_info.value.path == Path("X.java")

    def test_problems_after_first_type_are_ignored(self):
        source = b"import b.B;\nimport a.A;\n\nclass X { void f() { int x = ; } }\n"
        result = _sorter().parse_file("X.java", source)
        assert [i.path for i in result.imports] == ["b.B", "a.A"]

    def test_unable_to_parse(self):
        with pytest.raises(ImpSortError) as exc_info:
            _sorter().parse_file("X.java", b"}}}\n")
        assert exc_info.value.reason == Reason.UNABLE_TO_PARSE

    def test_empty_file(self):
        result = _sorter().parse_file("X.java", b"")
        assert result is Result.EMPTY_FILE
        assert result.is_sorted
        assert result.imports == []

    def test_no_imports(self):
        source = b"package p;\n\nclass X {}\n"
        result = _sorter().parse_file("X.java", source)
        assert (result.start, result.stop) == (0, 3)
        assert result.is_sorted
        assert result.render() == source

    def test_reads_from_disk(self, tmp_path):
        path = tmp_path / "X.java"
        path.write_bytes(b"import b.B;\nimport a.A;\nclass X {}\n")
        result = _sorter().parse_file(path)
        assert result.path == path
        assert not result.is_sorted

    def test_source_encoding(self):
        source = "import b.B;\nimport a.A;\n\nclass X { String s = \"café\"; }\n".encode("ISO-8859-1")
        result = _sorter(source_encoding="ISO-8859-1").parse_file("X.java", source)
        output = result.render()
        assert b"caf\xe9" in output
        assert output.startswith(b"import a.A;\nimport b.B;\n")

    def test_idempotent(self):
        source = (FIXTURES / "UnusedImports.java").read_bytes()
        sorter = _sorter(grouper=Grouper("java.,javax.,org.,com."), remove_unused=True)
        first = sorter.parse_file("UnusedImports.java", source)
        again = sorter.parse_file("UnusedImports.java", source)
        assert first.new_section == again.new_section


class TestUnusedImports:
    """Test cases for unused import removal."""

    def test_fixture(self):
        source = (FIXTURES / "UnusedImports.java").read_bytes()
        result = _sorter(remove_unused=True).parse_file("UnusedImports.java", source)
        imports = {i.path for i in result.imports}

        for n in range(1, 11):
            assert f"com.foo.Type{n}" in imports
        assert "com.google.common.collect.ImmutableMap" in imports
        assert "java.util.HashMap" in imports
        assert "java.util.List" in imports
        assert "java.util.Map" in imports
        assert "org.springframework.stereotype.Component" in imports
        assert "org.junit.Assert.assertFalse" in imports
        assert "org.junit.Assert.*" in imports

        assert "com.google.common.base.Predicates" not in imports
        assert "io.swagger.annotations.ApiOperation" not in imports
        assert "java.util.ArrayList" not in imports
        assert "org.springframework.beans.factory.annotation.Autowired" not in imports
        assert "org.junit.Assert.assertEquals" not in imports
        assert len(imports) == 17

    def test_javadoc_see_keeps_import(self):
        source = (
            b"import x.Bar;\n"
            b"import x.Foo;\n"
            b"\n"
            b"/**\n"
            b" * @see Foo\n"
            b" */\n"
            b"class X {}\n"
        )
        result = _sorter(remove_unused=True).parse_file("X.java", source)
        assert [i.path for i in result.imports] == ["x.Foo"]

    def test_javadoc_throws_keeps_import(self):
        source = (
            b"import java.io.IOException;\n"
            b"\n"
            b"class X {\n"
            b"  /** @throws IOException sometimes */\n"
            b"  void f() {}\n"
            b"}\n"
        )
        result = _sorter(remove_unused=True).parse_file("X.java", source)
        assert [i.path for i in result.imports] == ["java.io.IOException"]

    def test_javadoc_param_name_keeps_import(self):
        # block tags count by their full text, names included
        source = (
            b"import x.bar;\n"
            b"\n"
            b"class X {\n"
            b"  /** @param bar the value */\n"
            b"  void f() {}\n"
            b"}\n"
        )
        result = _sorter(remove_unused=True).parse_file("X.java", source)
        assert [i.path for i in result.imports] == ["x.bar"]

    def test_comments_do_not_count_as_use(self):
        source = b"import x.Foo;\n\nclass X { /* Foo */ // Foo\n}\n"
        result = _sorter(remove_unused=True).parse_file("X.java", source)
        assert result.imports == []

    def test_star_imports_kept(self):
        imports = _imports("a.b.*", "a.b.C")
        remove_unused_imports(imports, set())
        assert list(imports) == [(False, "a.b.*")]

    def test_disabled_by_default(self):
        source = b"import x.Foo;\n\nclass X {}\n"
        result = _sorter().parse_file("X.java", source)
        assert [i.path for i in result.imports] == ["x.Foo"]


class TestSamePackageImports:
    """Test cases for same-package import removal."""

    PATHS = ("abc.Blah", "abcd.ef.Blah2", "abcd.ef.Blah.Blah", "abcd.efg.Blah2")

    def test_direct_members_removed(self):
        imports = _imports(*self.PATHS)
        package = PackageDeclaration("abcd.ef", Position(1, 1), Position(1, 16))
        remove_same_package_imports(imports, package)
        assert [p for _, p in imports] == ["abc.Blah", "abcd.ef.Blah.Blah", "abcd.efg.Blah2"]

    def test_default_package(self):
        imports = _imports("Blah", "a.Blah")
        remove_same_package_imports(imports, None)
        assert [p for _, p in imports] == ["a.Blah"]

    def test_applied_with_remove_unused(self):
        source = b"package p;\n\nimport p.A;\nimport q.A;\n\nclass X { A a; }\n"
        result = _sorter(remove_unused=True).parse_file("X.java", source)
        assert [i.path for i in result.imports] == ["q.A"]

    def test_can_be_disabled(self):
        source = b"package p;\n\nimport p.A;\n\nclass X { A a; }\n"
        sorter = _sorter(remove_unused=True, treat_same_package_as_unused=False)
        result = sorter.parse_file("X.java", source)
        assert [i.path for i in result.imports] == ["p.A"]


class TestSplitLines:

    def test_any_terminator(self):
        assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]

    def test_only_final_terminator_dropped(self):
        assert split_lines("a\n\n\n") == ["a", "", ""]
        assert split_lines("a\r\n") == ["a"]
        assert split_lines("a") == ["a"]
        assert split_lines("") == []
