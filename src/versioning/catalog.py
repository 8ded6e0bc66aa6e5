"""Catalog adapters supplying candidate versions per package name.

The resolver only needs a callable ``lookup(name) -> Sequence[version]``.
Adapters here serve an in-memory mapping and add caching; transport to a
real registry belongs to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import semantic_version
import yaml

from constants import Constants

from .cache import TTLCache
from .errors import CatalogUnavailable, MalformedVersion
from .models import SemanticVersion
from .version import parse_version

logger = logging.getLogger(__name__)

CatalogLookup = Callable[[str], Sequence[Union[SemanticVersion, str]]]


def normalize_candidate(text: str, coerce: bool = False) -> SemanticVersion:
    """Parse one catalog entry.

    Entries are parsed loosely; with ``coerce`` partial versions such as
    ``1.2`` are completed through ``semantic_version.Version.coerce``.

    Raises:
        MalformedVersion: If the entry cannot be interpreted.
    """
    try:
        return parse_version(text, loose=True)
    except MalformedVersion:
        if not coerce:
            raise
    try:
        coerced = semantic_version.Version.coerce(text.strip())
    except ValueError as e:
        raise MalformedVersion(text, "not coercible to a semantic version") from e
    return parse_version(str(coerced))


def normalize_candidates(name: str, entries: Iterable[object], coerce: bool = False) -> List[SemanticVersion]:
    """Parse catalog entries in order, skipping the malformed ones."""
    versions: List[SemanticVersion] = []
    for entry in entries:
        if isinstance(entry, SemanticVersion):
            versions.append(entry)
            continue
        try:
            versions.append(normalize_candidate(str(entry), coerce=coerce))
        except MalformedVersion as e:
            logger.debug("Skipping catalog entry %r for %s: %s", entry, name, e.reason)
    return versions


class StaticCatalog:
    """Catalog backed by a mapping of package name to version list.

    Order is preserved so that ties in precedence resolve to the first entry.
    Unknown names yield an empty candidate list.
    """

    def __init__(self, versions: Mapping[str, Iterable[object]], coerce: Optional[bool] = None):
        """Normalize every version list up front.

        Raises:
            ValueError: If ``versions`` is not a mapping of name to version list.
        """
        if coerce is None:
            coerce = Constants.CATALOG_COERCE
        if not isinstance(versions, Mapping):
            raise ValueError("Catalog must be a mapping of package name to version list")
        self._versions: Dict[str, List[SemanticVersion]] = {}
        for name, entries in versions.items():
            if entries is not None and not isinstance(entries, (list, tuple)):
                raise ValueError(f"Catalog entry for {name!r} must be a list of versions")
            self._versions[str(name)] = normalize_candidates(str(name), entries or [], coerce)

    @classmethod
    def from_file(cls, path: str, coerce: Optional[bool] = None) -> "StaticCatalog":
        """Load a YAML or JSON file mapping package names to version lists."""
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh) if path.lower().endswith(".json") else yaml.safe_load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"Catalog file {path} must contain a mapping")
        return cls(data, coerce=coerce)

    def names(self) -> List[str]:
        return sorted(self._versions)

    def __call__(self, name: str) -> List[SemanticVersion]:
        return list(self._versions.get(name, []))


class CachingCatalog:
    """Wrap a lookup with a TTL cache; failures are never cached."""

    def __init__(self, lookup: CatalogLookup, cache: Optional[TTLCache] = None, ttl: Optional[int] = None):
        self._lookup = lookup
        self._cache = cache if cache is not None else TTLCache()
        self._ttl = ttl if ttl is not None else Constants.CATALOG_CACHE_TTL_SEC

    def __call__(self, name: str) -> Sequence[Union[SemanticVersion, str]]:
        cache_key = f"catalog:{name}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached
        versions = self._lookup(name)
        if versions is None:
            raise CatalogUnavailable(name, "lookup returned no data")
        versions = tuple(versions)
        self._cache.set(cache_key, versions, self._ttl)
        return versions
