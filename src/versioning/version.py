"""Semantic version parsing and precedence helpers."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple, Union

from constants import Constants

from .errors import MalformedVersion
from .models import Identifier, SemanticVersion

_NUMERIC = r"0|[1-9][0-9]*"
_IDENT = r"[0-9A-Za-z-]+"

SEMVER_RE = re.compile(
    rf"^(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<prerelease>{_IDENT}(?:\.{_IDENT})*))?"
    rf"(?:\+(?P<build>{_IDENT}(?:\.{_IDENT})*))?$"
)

VersionLike = Union[str, SemanticVersion]


def _parse_prerelease(text: str, raw: str) -> Tuple[Identifier, ...]:
    identifiers: List[Identifier] = []
    for ident in text.split("."):
        if ident.isdigit():
            if len(ident) > 1 and ident[0] == "0":
                raise MalformedVersion(raw, f"numeric identifier {ident!r} has a leading zero")
            identifiers.append(int(ident))
        else:
            identifiers.append(ident)
    return tuple(identifiers)


def parse_version(text: str, loose: bool = False) -> SemanticVersion:
    """Parse ``MAJOR.MINOR.PATCH[-prerelease][+build]`` into a SemanticVersion.

    Args:
        text: Version text.
        loose: Trim whitespace and accept a single leading ``v`` or ``=``,
            as found in tool output (``v18.17.0``) and manifests.

    Raises:
        MalformedVersion: If the text is not a valid semantic version.
    """
    if not isinstance(text, str):
        raise MalformedVersion(text, "version must be a string")
    if len(text) > Constants.MAX_VERSION_LENGTH:
        raise MalformedVersion(text, f"longer than {Constants.MAX_VERSION_LENGTH} characters")

    candidate = text
    if loose:
        candidate = candidate.strip()
        if candidate[:1] in ("v", "V", "="):
            candidate = candidate[1:].lstrip()

    m = SEMVER_RE.fullmatch(candidate)
    if not m:
        raise MalformedVersion(text, "expected MAJOR.MINOR.PATCH[-prerelease][+build]")

    prerelease = m.group("prerelease")
    build = m.group("build")
    return SemanticVersion(
        major=int(m.group("major")),
        minor=int(m.group("minor")),
        patch=int(m.group("patch")),
        prerelease=_parse_prerelease(prerelease, text) if prerelease else (),
        build=tuple(build.split(".")) if build else (),
    )


def ensure_version(value: VersionLike, loose: bool = False) -> SemanticVersion:
    """Return ``value`` as a SemanticVersion, parsing strings."""
    if isinstance(value, SemanticVersion):
        return value
    return parse_version(value, loose=loose)


def valid_version(text: str, loose: bool = False) -> Optional[str]:
    """Return the normalized version text, or None when ``text`` is not valid."""
    try:
        return str(parse_version(text, loose=loose))
    except MalformedVersion:
        return None


def render(version: SemanticVersion) -> str:
    """Render a version back to text; parsing the result yields the same version."""
    return str(version)


def compare_versions(a: VersionLike, b: VersionLike) -> int:
    """Compare two versions by precedence, returning -1, 0 or 1."""
    ka = ensure_version(a).precedence_key()
    kb = ensure_version(b).precedence_key()
    return (ka > kb) - (ka < kb)


def sort_versions(versions: Iterable[VersionLike], reverse: bool = False) -> List[SemanticVersion]:
    """Sort versions by precedence; equal versions keep their input order."""
    return sorted((ensure_version(v) for v in versions), key=SemanticVersion.precedence_key, reverse=reverse)
