"""Tests for the dependency graph model and manifest loader."""

import pytest

from versioning.errors import MalformedRange
from versioning.graph import DependencyGraph, PackageNode, graph_from_manifest
from versioning.parser import parse_range


MANIFEST = {
    "root": "app",
    "packages": {
        "app": {
            "dependencies": {"react": "^18.0.0", "react-dom": "^18.0.0"},
        },
        "react-dom": {
            "version": "18.2.0",
            "peerDependencies": {"react": "^18.2.0"},
        },
        "plugin": {
            "peerDependencies": {"typescript": ">=4.7", "react": ">=16"},
            "peerDependenciesMeta": {"typescript": {"optional": True}, "eslint": {"optional": True}},
        },
    },
}


class TestGraphFromManifest:
    """Test graph_from_manifest."""

    def test_builds_nodes(self):
        graph = graph_from_manifest(MANIFEST)
        assert graph.root == "app"
        assert set(graph.nodes) == {"app", "react-dom", "plugin"}
        assert str(graph.nodes["react-dom"].version) == "18.2.0"
        assert graph.nodes["app"].dependencies["react"] == parse_range("^18.0.0")

    def test_meta_only_entry_is_optional_any(self):
        plugin = graph_from_manifest(MANIFEST).nodes["plugin"]
        assert plugin.peer_optional == frozenset({"typescript", "eslint"})
        assert plugin.peer_dependencies["eslint"] == parse_range("*")

    def test_root_defaults_to_first_package(self):
        data = {"packages": {"first": {}, "second": {}}}
        assert graph_from_manifest(data).root == "first"

    def test_peer_optional_list(self):
        data = {"packages": {"a": {"peerDependencies": {"x": "1.x"}, "peerOptional": ["x"]}}}
        assert graph_from_manifest(data).nodes["a"].peer_optional == frozenset({"x"})

    def test_malformed_range_propagates(self):
        data = {"packages": {"a": {"dependencies": {"x": "^^1"}}}}
        with pytest.raises(MalformedRange):
            graph_from_manifest(data)

    @pytest.mark.parametrize("data", [
        {},
        {"packages": {}},
        {"packages": ["a"]},
        {"packages": {"a": ["b"]}},
        {"packages": {"a": {"dependencies": ["b"]}}},
        {"root": "missing", "packages": {"a": {}}},
    ])
    def test_rejects_bad_shapes(self, data):
        with pytest.raises(ValueError):
            graph_from_manifest(data)


class TestDependencyGraph:
    """Requirement collection."""

    def test_peer_names_sorted(self):
        assert graph_from_manifest(MANIFEST).peer_names() == ["eslint", "react", "typescript"]

    def test_requirements_include_regular_dependencies(self):
        reqs = graph_from_manifest(MANIFEST).requirements_for("react")
        summary = sorted((r.requester, r.kind, r.optional) for r in reqs)
        assert summary == [
            ("app", "dependency", False),
            ("plugin", "peer", False),
            ("react-dom", "peer", False),
        ]

    def test_optional_flag(self):
        (req,) = graph_from_manifest(MANIFEST).requirements_for("typescript")
        assert req.optional
        assert req.requester == "plugin"

    def test_is_forced(self):
        graph = DependencyGraph(
            root="app",
            nodes={
                "app": PackageNode("app", dependencies={"lib": parse_range("1.x")}),
                "typescript": PackageNode("typescript"),
            },
        )
        assert graph.is_forced("lib")
        assert graph.is_forced("typescript")
        assert not graph.is_forced("eslint")

    def test_root_must_exist(self):
        with pytest.raises(ValueError):
            DependencyGraph(root="nope", nodes={})
