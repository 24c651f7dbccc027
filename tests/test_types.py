"""Tests for the Import and Group values."""

import pytest

from impsort.types import Group, Import, Position


class TestImport:
    """Test cases for Import."""

    def test_to_text_plain(self):
        assert Import(False, "java.util.List").to_text() == "import java.util.List;"

    def test_to_text_static_with_comments(self):
        imp = Import(True, "org.junit.Assert.*", "// tests", " // all")
        assert imp.to_text("\n") == "// tests\nimport static org.junit.Assert.*; // all"
        assert imp.to_text("\r\n") == "// tests\r\nimport static org.junit.Assert.*; // all"

    def test_combine_prefixes(self):
        first = Import(False, "a.B", "// first", "")
        second = Import(False, "a.B", "// second", "")
        combined = first.combine_with(second)
        assert combined == Import(False, "a.B", "// first\n// second", "")

    def test_combine_suffixes_without_separator(self):
        first = Import(False, "a.B", "", " // one")
        second = Import(False, "a.B", "", " // two")
        assert first.combine_with(second).suffix == " // one // two"

    def test_combine_skips_empty_comments(self):
        first = Import(False, "a.B", "", "")
        second = Import(False, "a.B", "/* x */", "")
        assert first.combine_with(second, "\r\n").prefix == "/* x */"

    def test_duplication_ignores_comments(self):
        assert Import(False, "a.B", "// x").key == Import(False, "a.B").key
        assert Import(False, "a.B").key != Import(True, "a.B").key
        assert Import(False, "a.B", "// x") != Import(False, "a.B")

    def test_last_segment(self):
        assert Import(False, "a.b.C").last_segment == "C"
        assert Import(True, "a.b.*").last_segment == "*"


class TestGroup:
    """Test cases for Group."""

    def test_negative_order_rejected(self):
        with pytest.raises(ValueError):
            Group("a.", -1)

    def test_matches(self):
        assert Group("*", 0).matches("anything.At.All")
        assert Group("java.", 0).matches("java.util.List")
        assert not Group("java.", 0).matches("javax.inject.Inject")
        assert Group("java", 0).matches("javax.inject.Inject")


class TestPosition:

    def test_ordering(self):
        assert Position(1, 20) < Position(2, 1)
        assert Position(3, 4) < Position(3, 5)
        assert str(Position(3, 4)) == "3:4"
