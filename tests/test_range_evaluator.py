"""Tests for range satisfaction and intersection."""

import pytest

from versioning.errors import MalformedRange, MalformedVersion
from versioning.evaluator import (
    filter_satisfying,
    intersect,
    intersects,
    is_feasible,
    max_satisfying,
    min_satisfying,
    satisfies,
)
from versioning.parser import parse_range
from versioning.version import parse_version


class TestSatisfies:
    """Test satisfies against the documented range semantics."""

    @pytest.mark.parametrize("range_,version,expected", [
        ("^1.2.3", "1.9.9", True),
        ("^1.2.3", "1.2.3", True),
        ("^1.2.3", "1.2.2", False),
        ("^1.2.3", "2.0.0", False),
        ("^0.2.3", "0.2.9", True),
        ("^0.2.3", "0.3.0", False),
        ("^0.0.3", "0.0.3", True),
        ("^0.0.3", "0.0.4", False),
        ("~1.2.3", "1.2.9", True),
        ("~1.2.3", "1.3.0", False),
        ("~1", "1.9.0", True),
        ("~1", "2.0.0", False),
        ("1.2.0 - 1.3.0", "1.2.0", True),
        ("1.2.0 - 1.3.0", "1.3.0", True),
        ("1.2.0 - 1.3.0", "1.3.1", False),
        ("1.2.0 - 1.3.0", "1.1.9", False),
        ("^1.0.0 || ^2.0.0", "1.5.0", True),
        ("^1.0.0 || ^2.0.0", "2.5.0", True),
        ("^1.0.0 || ^2.0.0", "3.0.0", False),
        ("1.2.x", "1.2.7", True),
        ("1.2.x", "1.3.0", False),
        ("*", "0.0.1", True),
        ("*", "99.0.0", True),
        (">=1.2.7 <1.3.0", "1.2.8", True),
        (">=1.2.7 <1.3.0", "1.3.0", False),
        (">1.2.3", "1.2.3", False),
        ("<=1.2.3", "1.2.3", True),
    ])
    def test_ranges(self, range_, version, expected):
        assert satisfies(version, range_) is expected

    def test_accepts_parsed_values(self):
        assert satisfies(parse_version("1.5.0"), parse_range("^1.0.0"))

    def test_malformed_inputs_raise(self):
        with pytest.raises(MalformedVersion):
            satisfies("1.2", "^1.0.0")
        with pytest.raises(MalformedRange):
            satisfies("1.2.0", "^^1")


class TestPrereleasePolicy:
    """Prereleases only match sets naming a prerelease on the same release."""

    def test_plain_caret_rejects_prerelease(self):
        assert not satisfies("1.2.4-beta", "^1.2.3")

    def test_same_base_prerelease_matches(self):
        assert satisfies("1.2.3-beta.1", "^1.2.3-beta")

    def test_other_base_prerelease_rejected(self):
        assert not satisfies("1.2.4-beta.1", "^1.2.3-beta")

    def test_release_still_matches_prerelease_range(self):
        assert satisfies("1.5.0", "^1.2.3-beta")

    def test_star_rejects_prerelease(self):
        assert not satisfies("1.0.0-rc.1", "*")

    def test_upper_bound_prerelease(self):
        assert satisfies("2.0.0-rc.1", ">=1.0.0 <=2.0.0-rc.2")
        assert not satisfies("2.0.0-rc.3", ">=1.0.0 <=2.0.0-rc.2")

    def test_policy_is_per_set(self):
        r = "1.2.3-alpha || >=1.0.0"
        assert satisfies("1.2.3-alpha", r)
        assert not satisfies("1.2.3-beta", "<1.0.0 || >=1.0.0")

    def test_include_prerelease(self):
        assert satisfies("1.2.4-beta", "^1.2.3", include_prerelease=True)
        assert not satisfies("2.0.0-beta", "^1.2.3", include_prerelease=True)


class TestBuildMetadata:
    """Build metadata never influences satisfaction."""

    def test_exact_match_ignores_build(self):
        assert satisfies("1.0.0+build1", "=1.0.0")
        assert satisfies("1.0.0+build2", "=1.0.0")

    def test_range_build_ignored(self):
        assert satisfies("1.0.0", "=1.0.0+other")
        assert not satisfies("1.0.0+x", ">1.0.0")


class TestSelection:
    """max/min/filter helpers."""

    CATALOG = ["1.0.0", "1.2.0", "1.5.0", "2.0.0"]

    def test_max_satisfying(self):
        assert str(max_satisfying(self.CATALOG, "^1.0.0")) == "1.5.0"

    def test_min_satisfying(self):
        assert str(min_satisfying(self.CATALOG, ">1.0.0")) == "1.2.0"

    def test_none_when_no_match(self):
        assert max_satisfying(self.CATALOG, "^3.0.0") is None
        assert min_satisfying([], "*") is None

    def test_ties_keep_first(self):
        chosen = max_satisfying(["1.0.0+b", "1.0.0+a"], "^1.0.0")
        assert chosen.build == ("b",)

    def test_filter_skips_malformed(self):
        matches = filter_satisfying(["1.0.0", "junk", "1.1", "1.1.0"], "^1.0.0")
        assert [str(v) for v in matches] == ["1.0.0", "1.1.0"]


class TestIntersection:
    """Bounds-based intersection of ranges."""

    def test_disjoint(self):
        assert not intersects(">=2.0.0", "<1.0.0")
        assert not intersects("^1.0.0", "^2.0.0")

    def test_overlapping(self):
        assert intersects("^1.0.0", ">=1.4.0")
        assert intersects("1.2.0 - 1.3.0", "~1.3.0")

    def test_touching_bounds(self):
        assert intersects("<=1.0.0", ">=1.0.0")
        assert not intersects("<1.0.0", ">=1.0.0")
        assert not intersects("<=1.0.0", ">1.0.0")

    def test_exact_versions(self):
        assert intersects("1.0.0", "^1.0.0")
        assert not intersects("1.0.0", "1.0.1")

    def test_unsatisfiable_set(self):
        assert not is_feasible(parse_range(">*").sets[0])
        assert intersect([">*"]) is None

    def test_or_keeps_feasible_combinations(self):
        r = intersect(["^1.0.0 || ^2.0.0", ">=1.5.0 <2.5.0"])
        assert r is not None
        assert len(r.sets) == 2
        assert satisfies("1.6.0", r)
        assert satisfies("2.4.0", r)
        assert not satisfies("2.6.0", r)

    def test_three_way(self):
        assert intersect(["^1.0.0", ">=1.2.0", "<1.3.0"]) is not None
        assert intersect(["^1.0.0", ">=1.2.0", "<1.1.0"]) is None

    def test_many_alternatives_collapse_by_bounds(self):
        r = intersect([">=1.0.0 || >=1.1.0"] * 30)
        assert r is not None
        assert sorted(str(s) for s in r) == [">=1.0.0", ">=1.1.0"]
        assert satisfies("1.0.5", r)

    def test_many_ranges_narrow_to_tightest_bounds(self):
        ranges = [f">=1.{i}.0 <3.0.0 || ^2.0.0" for i in range(25)]
        r = intersect(ranges)
        assert r is not None
        assert satisfies("2.5.0", r)
        assert not satisfies("1.5.0", r)
        assert intersect(ranges + ["<1.0.0"]) is None

    def test_empty_input_is_any(self):
        r = intersect([])
        assert satisfies("5.0.0", r)
