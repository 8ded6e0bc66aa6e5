"""Typed dependency graph handed to the peer resolver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from .models import PeerRequirement, Range, SemanticVersion
from .parser import parse_range
from .version import parse_version


@dataclass(frozen=True)
class PackageNode:
    """One package of the graph and the ranges it declares."""
    name: str
    version: Optional[SemanticVersion] = None
    dependencies: Mapping[str, Range] = field(default_factory=dict)
    peer_dependencies: Mapping[str, Range] = field(default_factory=dict)
    peer_optional: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class DependencyGraph:
    """Set of packages plus the distinguished root; read-only once built."""
    root: str
    nodes: Mapping[str, PackageNode]

    def __post_init__(self):
        if self.root not in self.nodes:
            raise ValueError(f"Root package {self.root!r} is not part of the graph")

    def peer_names(self) -> List[str]:
        """Every name declared as a peer dependency, sorted."""
        names = set()
        for node in self.nodes.values():
            names.update(node.peer_dependencies)
        return sorted(names)

    def is_forced(self, name: str) -> bool:
        """Whether ``name`` is installed regardless of peers: a node, or a regular dependency."""
        if name in self.nodes:
            return True
        return any(name in node.dependencies for node in self.nodes.values())

    def installed_version(self, name: str) -> Optional[SemanticVersion]:
        """Version recorded on the graph node for ``name``, if any."""
        node = self.nodes.get(name)
        return node.version if node is not None else None

    def requirements_for(self, name: str) -> List[PeerRequirement]:
        """Collect the requirements every package contributes on ``name``.

        Peer declarations keep their optional flag; regular dependencies on
        the same name are required since they install the package anyway.
        """
        reqs: List[PeerRequirement] = []
        for node in self.nodes.values():
            if name in node.peer_dependencies:
                reqs.append(PeerRequirement(
                    requester=node.name,
                    range=node.peer_dependencies[name],
                    optional=name in node.peer_optional,
                    kind="peer",
                ))
            if name in node.dependencies:
                reqs.append(PeerRequirement(
                    requester=node.name, range=node.dependencies[name], optional=False, kind="dependency",
                ))
        return reqs


def _ranges(section: Any, where: str) -> Dict[str, Range]:
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"{where} must be a mapping of name to range")
    return {str(name): parse_range(str(spec)) for name, spec in section.items()}


def _node_from_mapping(name: str, data: Mapping[str, Any]) -> PackageNode:
    if not isinstance(data, dict):
        raise ValueError(f"Package entry {name!r} must be a mapping")

    peers = _ranges(data.get("peerDependencies"), f"{name}.peerDependencies")
    optional = set(data.get("peerOptional") or [])
    meta = data.get("peerDependenciesMeta") or {}
    if not isinstance(meta, dict):
        raise ValueError(f"{name}.peerDependenciesMeta must be a mapping")
    for peer, flags in meta.items():
        if isinstance(flags, dict) and flags.get("optional"):
            optional.add(peer)
            # A meta entry alone declares an optional peer on any version.
            peers.setdefault(peer, parse_range("*"))

    version = data.get("version")
    return PackageNode(
        name=name,
        version=parse_version(str(version), loose=True) if version else None,
        dependencies=_ranges(data.get("dependencies"), f"{name}.dependencies"),
        peer_dependencies=peers,
        peer_optional=frozenset(optional),
    )


def graph_from_manifest(data: Mapping[str, Any]) -> DependencyGraph:
    """Build a DependencyGraph from an npm-shaped mapping.

    Expected shape::

        root: my-app
        packages:
          my-app: {dependencies: {react: "^18.0.0"}}
          react-dom:
            version: 18.2.0
            peerDependencies: {react: "^18.2.0"}
            peerDependenciesMeta: {react: {optional: true}}

    Raises:
        ValueError: If the mapping has the wrong shape.
        MalformedRange: If a declared range cannot be parsed.
        MalformedVersion: If an installed version cannot be parsed.
    """
    packages = data.get("packages")
    if not isinstance(packages, dict) or not packages:
        raise ValueError("Manifest must define a non-empty 'packages' mapping")
    root = data.get("root") or next(iter(packages))
    nodes = {str(name): _node_from_mapping(str(name), entry or {}) for name, entry in packages.items()}
    return DependencyGraph(root=str(root), nodes=nodes)
