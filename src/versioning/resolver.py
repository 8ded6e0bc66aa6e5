"""Peer dependency resolution over a DependencyGraph.

Each peer name is resolved independently: its requirements are collected
from the graph, the required ranges are intersected, and the highest catalog
version satisfying all of them is chosen. Problems are reported per peer so
that one pass surfaces every conflict.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants

from .catalog import CatalogLookup, normalize_candidates
from .errors import CatalogUnavailable
from .evaluator import intersect, intersects, satisfies
from .graph import DependencyGraph
from .models import (
    PeerRequirement,
    ResolutionCause,
    ResolutionResult,
    ResolutionStatus,
    SemanticVersion,
)

logger = logging.getLogger(__name__)


def _describe(requirements: Sequence[PeerRequirement]) -> str:
    return ", ".join(f"{r.requester} ({r.range.raw or r.range})" for r in requirements)


def _conflicting_pairs(required: Sequence[PeerRequirement]) -> List[Tuple[str, ...]]:
    pairs: List[Tuple[str, ...]] = [
        (a.requester, b.requester)
        for a, b in combinations(required, 2)
        if not intersects(a.range, b.range)
    ]
    # Every pair overlaps but the group as a whole does not.
    return pairs or [tuple(r.requester for r in required)]


class PeerResolver:
    """Resolve every peer name of a graph against a catalog.

    Args:
        catalog_lookup: Callable returning candidate versions for a name; it
            may raise to signal that no candidate list is available.
        max_workers: Worker threads used across peer names; 1 resolves inline.
        include_prerelease: Let prerelease candidates match plain ranges.
    """

    def __init__(
        self,
        catalog_lookup: CatalogLookup,
        max_workers: Optional[int] = None,
        include_prerelease: Optional[bool] = None,
    ):
        self.catalog_lookup = catalog_lookup
        self.max_workers = max_workers if max_workers is not None else Constants.RESOLVER_MAX_WORKERS
        self.include_prerelease = (
            include_prerelease if include_prerelease is not None else Constants.INCLUDE_PRERELEASE
        )

    def _fetch_candidates(self, name: str) -> List[SemanticVersion]:
        entries = self.catalog_lookup(name)
        if entries is None:
            raise CatalogUnavailable(name, "lookup returned no data")
        return normalize_candidates(name, entries, coerce=Constants.CATALOG_COERCE)

    def resolve_peer(self, graph: DependencyGraph, name: str) -> ResolutionResult:
        """Resolve a single peer name."""
        requirements = graph.requirements_for(name)
        required = [r for r in requirements if not r.optional]
        optional = [r for r in requirements if r.optional]

        if not required and not graph.is_forced(name):
            logger.debug("Skipping optional peer %s", name)
            return ResolutionResult(peer=name, status=ResolutionStatus.SKIPPED, requirements=requirements)

        intersection = intersect([r.range for r in required])
        if intersection is None:
            conflicts = _conflicting_pairs(required)
            logger.warning("Conflicting requirements on %s: %s", name, _describe(required))
            return ResolutionResult(
                peer=name,
                status=ResolutionStatus.UNSATISFIABLE,
                requirements=requirements,
                cause=ResolutionCause.CONFLICTING_CONSTRAINTS,
                conflicts=conflicts,
                error=f"No version of {name} can satisfy {_describe(required)}",
            )

        installed = graph.installed_version(name)
        if installed is not None:
            if all(satisfies(installed, r.range, self.include_prerelease) for r in required):
                logger.debug("Keeping installed %s@%s", name, installed)
                return self._resolved(name, installed, requirements, optional, installed, 0)
            logger.warning(
                "Installed %s@%s does not satisfy %s; looking for a replacement",
                name, installed, _describe(required),
            )

        try:
            candidates = self._fetch_candidates(name)
        except CatalogUnavailable as e:
            logger.warning("Catalog unavailable for %s: %s", name, e.reason)
            return self._unavailable(name, requirements, e.reason, installed)
        except Exception as e:  # pylint: disable=broad-exception-caught
            # Any collaborator failure is reported for this peer only.
            logger.warning("Catalog lookup for %s failed: %s", name, e)
            return self._unavailable(name, requirements, str(e) or e.__class__.__name__, installed)

        ranges = [r.range for r in required] or [intersection]
        chosen: Optional[SemanticVersion] = None
        for candidate in candidates:
            if not all(satisfies(candidate, r, self.include_prerelease) for r in ranges):
                continue
            if chosen is None or candidate > chosen:
                chosen = candidate

        if chosen is None:
            logger.warning("No catalog version of %s satisfies %s", name, _describe(required) or "*")
            return ResolutionResult(
                peer=name,
                status=ResolutionStatus.UNSATISFIABLE,
                requirements=requirements,
                cause=ResolutionCause.NO_MATCHING_CANDIDATE,
                installed_version=installed,
                candidate_count=len(candidates),
                error=f"None of {len(candidates)} candidate(s) for {name} satisfies {_describe(required) or '*'}",
            )
        return self._resolved(name, chosen, requirements, optional, installed, len(candidates))

    def _resolved(
        self,
        name: str,
        chosen: SemanticVersion,
        requirements: List[PeerRequirement],
        optional: List[PeerRequirement],
        installed: Optional[SemanticVersion],
        candidate_count: int,
    ) -> ResolutionResult:
        unmet = [r for r in optional if not satisfies(chosen, r.range, self.include_prerelease)]
        if unmet:
            logger.warning("Resolved %s@%s misses optional requirement(s): %s", name, chosen, _describe(unmet))
        return ResolutionResult(
            peer=name,
            status=ResolutionStatus.RESOLVED,
            chosen_version=chosen,
            requirements=requirements,
            unmet_optional=unmet,
            installed_version=installed,
            candidate_count=candidate_count,
        )

    @staticmethod
    def _unavailable(
        name: str, requirements: List[PeerRequirement], reason: str, installed: Optional[SemanticVersion] = None
    ) -> ResolutionResult:
        return ResolutionResult(
            peer=name,
            status=ResolutionStatus.UNSATISFIABLE,
            requirements=requirements,
            cause=ResolutionCause.CATALOG_UNAVAILABLE,
            installed_version=installed,
            error=f"Catalog unavailable for {name}: {reason}",
        )

    def _resolve_unless_cancelled(
        self, graph: DependencyGraph, name: str, cancel_event: Optional[threading.Event]
    ) -> Optional[ResolutionResult]:
        if cancel_event is not None and cancel_event.is_set():
            return None
        return self.resolve_peer(graph, name)

    def resolve(
        self, graph: DependencyGraph, cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, ResolutionResult]:
        """Resolve every peer name of ``graph``.

        Args:
            graph: Dependency graph; not mutated.
            cancel_event: When set, peers not yet started are left out of
                the result.

        Returns:
            Mapping of peer name to ResolutionResult, in sorted name order.
        """
        names = graph.peer_names()
        results: Dict[str, ResolutionResult] = {}

        with Timer() as t:
            if self.max_workers <= 1 or len(names) <= 1:
                for name in names:
                    result = self._resolve_unless_cancelled(graph, name, cancel_event)
                    if result is None:
                        break
                    results[name] = result
            else:
                with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                    futures = {}
                    for name in names:
                        if cancel_event is not None and cancel_event.is_set():
                            break
                        futures[pool.submit(self._resolve_unless_cancelled, graph, name, cancel_event)] = name
                    for future in as_completed(futures):
                        result = future.result()
                        if result is not None:
                            results[futures[future]] = result

        if is_debug_enabled(logger):
            logger.debug(
                "Peer resolution finished",
                extra=extra_context(
                    event="function_exit", component="resolver", action="resolve",
                    outcome="cancelled" if len(results) < len(names) else "complete",
                    count=len(results), duration_ms=t.duration_ms(),
                ),
            )
        return {name: results[name] for name in names if name in results}


def resolve(
    graph: DependencyGraph,
    catalog_lookup: CatalogLookup,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    include_prerelease: Optional[bool] = None,
) -> Dict[str, ResolutionResult]:
    """Resolve every peer name of ``graph`` against ``catalog_lookup``."""
    resolver = PeerResolver(catalog_lookup, max_workers=max_workers, include_prerelease=include_prerelease)
    return resolver.resolve(graph, cancel_event=cancel_event)
