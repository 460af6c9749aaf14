"""Tests for Maven version parsing and ordering."""

import itertools

import pytest

from versioning.errors import InvalidVersionFormat
from versioning.maven_version import MavenVersion


class TestParse:
    """Grammar coverage."""

    @pytest.mark.parametrize("raw, expected", [
        ("1", (1, 0, 0, "")),
        ("1.2", (1, 2, 0, "")),
        ("1.2.3", (1, 2, 3, "")),
        ("v2.0.1", (2, 0, 1, "")),
        ("r10", (10, 0, 0, "")),
        ("2.0b3", (2, 0, 3, "")),
        ("2.0beta3", (2, 0, 3, "")),
        ("1.0.0.RELEASE", (1, 0, 0, "release")),
        ("4.13-SNAPSHOT", (4, 13, 0, "snapshot")),
        ("1.0-alpha-1", (1, 0, 0, "alpha-1")),
        ("3.0.0-M5", (3, 0, 0, "m5")),
        ("1.2.3.4", (1, 2, 3, "4")),
    ])
    def test_components(self, raw, expected):
        version = MavenVersion.parse(raw)
        assert (version.major, version.minor, version.incremental, version.qualifier) == expected
        assert version.raw == raw

    @pytest.mark.parametrize("raw, lower", [
        ("[1.0,2.0)", "1.0"),
        ("[1.5, 2.0]", "1.5"),
        ("(3.1,4.0)", "3.1"),
        ("(2.0.1,]", "2.0.1"),
    ])
    def test_range_uses_lower_bound(self, raw, lower):
        assert MavenVersion.parse(raw) == MavenVersion.parse(lower)

    @pytest.mark.parametrize("raw", ["", "abc", "x1.0", "(,1.0]", "${project.version}"])
    def test_invalid(self, raw):
        with pytest.raises(InvalidVersionFormat) as exc_info:
            MavenVersion.parse(raw)
        assert exc_info.value.kind == "Maven"

    def test_oversized_number(self):
        with pytest.raises(InvalidVersionFormat):
            MavenVersion.parse("1" * 5000)
        with pytest.raises(InvalidVersionFormat):
            MavenVersion.parse("1." + "2" * 5000)

    def test_canonical_reparses_equal(self):
        for raw in ["1", "2.0b3", "1.0.0.RELEASE", "1-b2", "4.13.2-SNAPSHOT", "v1.2.3.4"]:
            version = MavenVersion.parse(raw)
            assert MavenVersion.parse(version.canonical) == version


class TestOrdering:
    """Comparison semantics."""

    def test_numeric_fields(self):
        assert MavenVersion.parse("1.10") > MavenVersion.parse("1.9")
        assert MavenVersion.parse("2") > MavenVersion.parse("1.99.99")
        assert MavenVersion.parse("1.0.1") > MavenVersion.parse("1.0")

    def test_missing_components_equal_zero(self):
        assert MavenVersion.parse("1") == MavenVersion.parse("1.0.0")
        assert MavenVersion.parse("1").compare(MavenVersion.parse("1.0")) == 0

    def test_empty_qualifier_sorts_first(self):
        assert MavenVersion.parse("1.0") < MavenVersion.parse("1.0-beta")

    def test_qualifier_is_lexical(self):
        assert MavenVersion.parse("1.0-alpha") > MavenVersion.parse("1.0-9")
        assert MavenVersion.parse("1.0-SNAPSHOT") == MavenVersion.parse("1.0-snapshot")

    def test_raw_not_part_of_equality(self):
        assert MavenVersion.parse("v1.2") == MavenVersion.parse("1.2")

    def test_compare_three_way(self):
        low, high = MavenVersion.parse("1.0"), MavenVersion.parse("1.1")
        assert low.compare(high) == -1
        assert high.compare(low) == 1

    def test_total_order(self):
        versions = [MavenVersion.parse(v) for v in
                    ["1.0", "1.0-alpha", "1.0.1", "0.9", "1.0-beta", "2", "1.0.0"]]
        for a, b in itertools.permutations(versions, 2):
            assert (a < b) + (a > b) + (a == b) == 1
            assert a.compare(b) == -b.compare(a)
        for a, b, c in itertools.permutations(versions, 3):
            if a <= b and b <= c:
                assert a <= c
