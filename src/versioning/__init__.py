"""Semantic-version ranges and peer-dependency resolution."""

from .engines import check_engine, check_engines
from .errors import CatalogUnavailable, MalformedRange, MalformedVersion, VersioningError
from .evaluator import filter_satisfying, intersect, intersects, max_satisfying, min_satisfying, satisfies
from .graph import DependencyGraph, PackageNode, graph_from_manifest
from .models import (
    Comparator,
    ComparatorSet,
    EngineCheckResult,
    EngineStatus,
    Operator,
    PeerRequirement,
    Range,
    ResolutionCause,
    ResolutionResult,
    ResolutionStatus,
    SemanticVersion,
)
from .parser import parse_range, tokenize_spec, valid_range
from .resolver import PeerResolver, resolve
from .version import compare_versions, parse_version, render, sort_versions, valid_version

__all__ = [
    "CatalogUnavailable",
    "Comparator",
    "ComparatorSet",
    "DependencyGraph",
    "EngineCheckResult",
    "EngineStatus",
    "MalformedRange",
    "MalformedVersion",
    "Operator",
    "PackageNode",
    "PeerRequirement",
    "PeerResolver",
    "Range",
    "ResolutionCause",
    "ResolutionResult",
    "ResolutionStatus",
    "SemanticVersion",
    "VersioningError",
    "check_engine",
    "check_engines",
    "compare_versions",
    "filter_satisfying",
    "graph_from_manifest",
    "intersect",
    "intersects",
    "max_satisfying",
    "min_satisfying",
    "parse_range",
    "parse_version",
    "render",
    "resolve",
    "satisfies",
    "sort_versions",
    "tokenize_spec",
    "valid_range",
    "valid_version",
]
