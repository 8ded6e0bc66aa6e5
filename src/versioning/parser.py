"""Range expression parsing.

Expands npm-style range syntax (carets, tildes, hyphen ranges, x-ranges and
plain comparators joined by ``||``) into a Range of ComparatorSets.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from constants import Constants

from .errors import MalformedRange, MalformedVersion
from .models import Comparator, ComparatorSet, Operator, Range, SemanticVersion
from .version import _parse_prerelease

_WILDCARDS = ("x", "X", "*")
_PART = r"0|[1-9][0-9]*|[xX*]"
_IDENT = r"[0-9A-Za-z-]+"

PARTIAL_RE = re.compile(
    rf"^[vV]?(?P<major>{_PART})"
    rf"(?:\.(?P<minor>{_PART})"
    rf"(?:\.(?P<patch>{_PART})"
    rf"(?:-(?P<prerelease>{_IDENT}(?:\.{_IDENT})*))?"
    rf"(?:\+(?P<build>{_IDENT}(?:\.{_IDENT})*))?"
    r")?)?$"
)

# Longest operators first so ">=" wins over ">".
_OPERATORS = ("~>", ">=", "<=", "~", "^", ">", "<", "=")
_OP_SPACING_RE = re.compile(r"(~>|>=|<=|[~^<>=])\s+")

_ZERO = SemanticVersion(0, 0, 0)
_ANY = (Comparator(Operator.GTE, _ZERO),)
_NONE = (Comparator(Operator.LT, SemanticVersion(0, 0, 0, (0,))),)


@dataclass(frozen=True)
class _Partial:
    """A version with optional trailing components (None = wildcard/omitted)."""
    major: Optional[int]
    minor: Optional[int]
    patch: Optional[int]
    prerelease: Tuple = ()
    build: Tuple[str, ...] = ()

    @property
    def is_full(self) -> bool:
        return self.patch is not None

    def floor(self) -> SemanticVersion:
        """Lowest version matched, wildcards filled with zero."""
        return SemanticVersion(
            self.major or 0, self.minor or 0, self.patch or 0, self.prerelease, self.build
        )


def _parse_partial(text: str, raw: str) -> _Partial:
    m = PARTIAL_RE.fullmatch(text)
    if not m:
        raise MalformedRange(raw, f"invalid version {text!r}")

    parts: List[Optional[int]] = []
    wildcard = False
    for name in ("major", "minor", "patch"):
        value = m.group(name)
        if value is None or value in _WILDCARDS:
            wildcard = True
        # A wildcard widens every component after it.
        parts.append(None if wildcard else int(value))

    prerelease = m.group("prerelease")
    build = m.group("build")
    if prerelease and parts[2] is None:
        raise MalformedRange(raw, f"prerelease on a wildcard version {text!r}")
    try:
        pre = _parse_prerelease(prerelease, text) if prerelease else ()
    except MalformedVersion as e:
        raise MalformedRange(raw, e.reason) from e
    return _Partial(parts[0], parts[1], parts[2], pre, tuple(build.split(".")) if build else ())


def _gte(v: SemanticVersion) -> Comparator:
    return Comparator(Operator.GTE, v)


def _lt(major: int, minor: int = 0, patch: int = 0) -> Comparator:
    return Comparator(Operator.LT, SemanticVersion(major, minor, patch))


def _expand_xrange(p: _Partial) -> Tuple[Comparator, ...]:
    """Bare or ``=`` partial: exact match or the span of the omitted components."""
    if p.major is None:
        return _ANY
    if p.minor is None:
        return (_gte(p.floor()), _lt(p.major + 1))
    if p.patch is None:
        return (_gte(p.floor()), _lt(p.major, p.minor + 1))
    return (Comparator(Operator.EQ, p.floor()),)


def _expand_tilde(p: _Partial) -> Tuple[Comparator, ...]:
    if p.major is None:
        return _ANY
    if p.minor is None:
        return (_gte(p.floor()), _lt(p.major + 1))
    return (_gte(p.floor()), _lt(p.major, p.minor + 1))


def _expand_caret(p: _Partial) -> Tuple[Comparator, ...]:
    """Upper bound bumps the first non-zero component from the left."""
    if p.major is None:
        return _ANY
    if p.minor is None:
        return (_gte(p.floor()), _lt(p.major + 1))
    if p.major > 0:
        return (_gte(p.floor()), _lt(p.major + 1))
    if p.patch is None or p.minor > 0:
        return (_gte(p.floor()), _lt(0, p.minor + 1))
    return (_gte(p.floor()), _lt(0, 0, p.patch + 1))


def _expand_primitive(op: str, p: _Partial) -> Tuple[Comparator, ...]:
    if op == "=":
        return _expand_xrange(p)
    if p.is_full:
        return (Comparator(Operator(op), p.floor()),)
    if p.major is None:
        # Nothing is greater or smaller than every version.
        return _NONE if op in (">", "<") else _ANY

    if op == ">":
        if p.minor is None:
            return (_gte(SemanticVersion(p.major + 1, 0, 0)),)
        return (_gte(SemanticVersion(p.major, p.minor + 1, 0)),)
    if op == "<=":
        if p.minor is None:
            return (_lt(p.major + 1),)
        return (_lt(p.major, p.minor + 1),)
    if op == "<":
        return (Comparator(Operator.LT, p.floor()),)
    return (_gte(p.floor()),)


def _expand_hyphen(low: _Partial, high: _Partial) -> Tuple[Comparator, ...]:
    comparators: List[Comparator] = []
    if low.major is not None:
        comparators.append(_gte(low.floor()))
    if high.major is not None:
        if high.minor is None:
            comparators.append(_lt(high.major + 1))
        elif high.patch is None:
            comparators.append(_lt(high.major, high.minor + 1))
        else:
            comparators.append(Comparator(Operator.LTE, high.floor()))
    return tuple(comparators) or _ANY


def _split_operator(token: str) -> Tuple[str, str]:
    for op in _OPERATORS:
        if token.startswith(op):
            return op, token[len(op):]
    return "", token


def _parse_token(token: str, raw: str) -> Tuple[Comparator, ...]:
    op, rest = _split_operator(token)
    if not rest:
        raise MalformedRange(raw, f"operator {op!r} without a version")
    partial = _parse_partial(rest, raw)
    if op in ("~", "~>"):
        return _expand_tilde(partial)
    if op == "^":
        return _expand_caret(partial)
    if op == "":
        return _expand_xrange(partial)
    return _expand_primitive(op, partial)


def _parse_set(segment: str, raw: str) -> ComparatorSet:
    segment = _OP_SPACING_RE.sub(r"\1", segment.strip())
    tokens = segment.split()
    if not tokens:
        return ComparatorSet(_ANY)

    if "-" in tokens:
        if len(tokens) != 3 or tokens[1] != "-":
            raise MalformedRange(raw, "hyphen range must be 'LOW - HIGH'")
        low, high = tokens[0], tokens[2]
        if _split_operator(low)[0] or _split_operator(high)[0]:
            raise MalformedRange(raw, "hyphen range bounds cannot carry operators")
        return ComparatorSet(_expand_hyphen(_parse_partial(low, raw), _parse_partial(high, raw)))

    comparators: List[Comparator] = []
    for token in tokens:
        comparators.extend(_parse_token(token, raw))
    return ComparatorSet(tuple(comparators))


def parse_range(text: str) -> Range:
    """Parse a range expression into a Range.

    Args:
        text: Range text, e.g. ``"^1.2.3 || >=2.0.0 <2.5.0"``.

    Returns:
        Range whose comparator sets are OR-ed.

    Raises:
        MalformedRange: If the text uses unrecognized syntax.
    """
    if not isinstance(text, str):
        raise MalformedRange(text, "range must be a string")
    if len(text) > Constants.MAX_RANGE_LENGTH:
        raise MalformedRange(text, f"longer than {Constants.MAX_RANGE_LENGTH} characters")

    sets = tuple(_parse_set(segment, text) for segment in text.split("||"))
    return Range(sets=sets, raw=text.strip())


def ensure_range(value) -> Range:
    """Return ``value`` as a Range, parsing strings."""
    if isinstance(value, Range):
        return value
    return parse_range(value)


def valid_range(text: str) -> Optional[str]:
    """Return the normalized expansion of ``text``, or None when invalid."""
    try:
        return str(parse_range(text))
    except MalformedRange:
        return None


def tokenize_spec(token: str) -> Tuple[str, Optional[str]]:
    """Split ``name@range`` into (name, range or None) on the rightmost ``@``.

    A leading ``@`` belongs to a scoped name (``@scope/pkg@^1.0.0``).
    """
    s = token.strip()
    idx = s.rfind("@")
    if idx <= 0:
        return s, None
    identifier = s[:idx].strip()
    spec = s[idx + 1:].strip()
    return identifier, spec if spec else None
