"""Range satisfaction and range intersection.

All functions are pure and operate on immutable values, so they are safe to
call from any number of threads.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .errors import MalformedVersion
from .models import Comparator, ComparatorSet, Operator, Range, SemanticVersion
from .parser import ensure_range, parse_range
from .version import VersionLike, ensure_version

logger = logging.getLogger(__name__)

RangeLike = Union[str, Range]

# (version, inclusive)
_Bound = Tuple[SemanticVersion, bool]

# Nothing sorts below 0.0.0-0.
_MIN_VERSION = SemanticVersion(0, 0, 0, (0,))


def _test(comparator: Comparator, version: SemanticVersion) -> bool:
    key = version.precedence_key()
    other = comparator.version.precedence_key()
    op = comparator.operator
    if op is Operator.EQ:
        return key == other
    if op is Operator.GT:
        return key > other
    if op is Operator.GTE:
        return key >= other
    if op is Operator.LT:
        return key < other
    return key <= other


def _set_matches(cset: ComparatorSet, version: SemanticVersion, include_prerelease: bool) -> bool:
    if not all(_test(c, version) for c in cset):
        return False
    if not version.prerelease:
        return True
    if include_prerelease:
        # "<2.0.0" still excludes 2.0.0 prereleases.
        return not any(
            c.operator is Operator.LT and not c.version.prerelease and c.version.release == version.release
            for c in cset
        )
    # Prereleases only match sets that name a prerelease on the same release.
    return any(c.version.prerelease and c.version.release == version.release for c in cset)


def satisfies(version: VersionLike, range_: RangeLike, include_prerelease: bool = False) -> bool:
    """Return True if ``version`` satisfies at least one comparator set of ``range_``.

    Args:
        version: SemanticVersion or version text.
        range_: Range or range text.
        include_prerelease: Let prereleases match any set their precedence
            fits, instead of only sets naming a prerelease on the same
            major.minor.patch.

    Raises:
        MalformedVersion: If ``version`` is unparseable text.
        MalformedRange: If ``range_`` is unparseable text.
    """
    v = ensure_version(version)
    r = ensure_range(range_)
    return any(_set_matches(cset, v, include_prerelease) for cset in r)


def _iter_valid(versions: Iterable[VersionLike]) -> Iterable[SemanticVersion]:
    for item in versions:
        try:
            yield ensure_version(item)
        except MalformedVersion:
            logger.debug("Skipping malformed version %r", item)


def filter_satisfying(
    versions: Iterable[VersionLike], range_: RangeLike, include_prerelease: bool = False
) -> List[SemanticVersion]:
    """Return the versions satisfying ``range_`` in input order; malformed entries are skipped."""
    r = ensure_range(range_)
    return [v for v in _iter_valid(versions) if satisfies(v, r, include_prerelease)]


def max_satisfying(
    versions: Iterable[VersionLike], range_: RangeLike, include_prerelease: bool = False
) -> Optional[SemanticVersion]:
    """Highest-precedence match; ties keep the first one in input order."""
    best: Optional[SemanticVersion] = None
    for v in filter_satisfying(versions, range_, include_prerelease):
        if best is None or v > best:
            best = v
    return best


def min_satisfying(
    versions: Iterable[VersionLike], range_: RangeLike, include_prerelease: bool = False
) -> Optional[SemanticVersion]:
    """Lowest-precedence match; ties keep the first one in input order."""
    best: Optional[SemanticVersion] = None
    for v in filter_satisfying(versions, range_, include_prerelease):
        if best is None or v < best:
            best = v
    return best


def _tighter_lower(current: _Bound, new: _Bound) -> _Bound:
    if new[0] > current[0] or (new[0] == current[0] and not new[1]):
        return new
    return current


def _tighter_upper(current: Optional[_Bound], new: _Bound) -> _Bound:
    if current is None or new[0] < current[0] or (new[0] == current[0] and not new[1]):
        return new
    return current


def _bounds(cset: ComparatorSet) -> Tuple[_Bound, Optional[_Bound]]:
    low: _Bound = (_MIN_VERSION, True)
    high: Optional[_Bound] = None
    for c in cset:
        op = c.operator
        if op in (Operator.EQ, Operator.GTE):
            low = _tighter_lower(low, (c.version, True))
        elif op is Operator.GT:
            low = _tighter_lower(low, (c.version, False))
        if op in (Operator.EQ, Operator.LTE):
            high = _tighter_upper(high, (c.version, True))
        elif op is Operator.LT:
            high = _tighter_upper(high, (c.version, False))
    return low, high


def _bounds_feasible(low: _Bound, high: Optional[_Bound]) -> bool:
    if high is None:
        return True
    if low[0] < high[0]:
        return True
    return low[0] == high[0] and low[1] and high[1]


def is_feasible(cset: ComparatorSet) -> bool:
    """Whether some version lies within the precedence bounds of ``cset``.

    Only precedence is considered; the prerelease matching rule is not.
    """
    return _bounds_feasible(*_bounds(cset))


def _merge_bounds(
    a: Tuple[_Bound, Optional[_Bound]], b: Tuple[_Bound, Optional[_Bound]]
) -> Tuple[_Bound, Optional[_Bound]]:
    low = _tighter_lower(a[0], b[0])
    high = a[1] if b[1] is None else _tighter_upper(a[1], b[1])
    return low, high


def _set_from_bounds(low: _Bound, high: Optional[_Bound]) -> ComparatorSet:
    if high is not None and low[0] == high[0]:
        return ComparatorSet((Comparator(Operator.EQ, low[0]),))
    comparators: List[Comparator] = []
    if low != (_MIN_VERSION, True):
        comparators.append(Comparator(Operator.GTE if low[1] else Operator.GT, low[0]))
    if high is not None:
        comparators.append(Comparator(Operator.LTE if high[1] else Operator.LT, high[0]))
    return ComparatorSet(tuple(comparators) or (Comparator(Operator.GTE, SemanticVersion(0, 0, 0)),))


def intersect(ranges: Sequence[RangeLike]) -> Optional[Range]:
    """Intersect ranges into a single Range.

    Each comparator set is reduced to its (lower, upper) bounds. Every
    combination of one set per range is merged and combinations with equal
    bounds collapse, so the work stays polynomial in the number of ranges.

    Returns:
        The intersection as bound-only comparator sets, ``*`` for an empty
        input, or None when no combination is feasible.
    """
    if not ranges:
        return parse_range("*")

    parsed = [ensure_range(r) for r in ranges]
    combos: Dict[Tuple[_Bound, Optional[_Bound]], None] = {}
    for cset in parsed[0]:
        bounds = _bounds(cset)
        if _bounds_feasible(*bounds):
            combos.setdefault(bounds)
    for r in parsed[1:]:
        alternatives = list(dict.fromkeys(_bounds(cset) for cset in r))
        merged: Dict[Tuple[_Bound, Optional[_Bound]], None] = {}
        for left in combos:
            for right in alternatives:
                bounds = _merge_bounds(left, right)
                if _bounds_feasible(*bounds):
                    merged.setdefault(bounds)
        combos = merged
        if not combos:
            return None
    if not combos:
        return None
    sets = tuple(_set_from_bounds(low, high) for low, high in combos)
    return Range(sets=sets, raw=" ".join(f"({r.raw or r})" for r in parsed))


def intersects(a: RangeLike, b: RangeLike) -> bool:
    """Whether some version can satisfy both ranges."""
    return intersect([a, b]) is not None
