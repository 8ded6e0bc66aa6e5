"""Tests for the peergate CLI entry point and configuration layering."""

import json
import textwrap
from types import SimpleNamespace

import pytest

import peergate
from cli_config import apply_cli_overrides, load_config, parse_engine_args
from constants import Constants, ExitCodes, _load_yaml_config, apply_config


MANIFEST = textwrap.dedent("""\
    root: app
    engines:
      node: ">=18"
    packages:
      app:
        dependencies:
          react: "^18.0.0"
      react-dom:
        peerDependencies:
          react: "^18.2.0"
      plugin:
        peerDependencies:
          typescript: ">=4.7"
        peerDependenciesMeta:
          typescript:
            optional: true
    catalog:
      react: ["17.0.2", "18.0.0", "18.2.0", "18.3.0-canary"]
""")


@pytest.fixture
def manifest(tmp_path):
    path = tmp_path / "graph.yml"
    path.write_text(MANIFEST, encoding="utf-8")
    return path


def _run(capsys, *argv):
    code = peergate.main(list(argv))
    out = capsys.readouterr().out
    return code, (json.loads(out) if out.strip() else None)


class TestMain:
    """End-to-end runs through main()."""

    def test_resolves_and_prints_report(self, manifest, capsys):
        code, report = _run(capsys, "-m", str(manifest), "-e", "node=v18.17.0")
        assert code == ExitCodes.SUCCESS.value
        peers = {p["peer"]: p for p in report["peers"]}
        assert peers["react"]["chosenVersion"] == "18.2.0"
        assert peers["typescript"]["status"] == "skipped"
        assert report["engines"][0]["status"] == "ok"

    def test_engine_mismatch_warns(self, manifest, capsys):
        code, report = _run(capsys, "-m", str(manifest), "-e", "node=16.20.0")
        assert code == ExitCodes.SUCCESS.value
        assert report["summary"]["warnings"]

    def test_engine_strict_fails(self, manifest, capsys):
        code, _ = _run(capsys, "-m", str(manifest), "-e", "node=16.20.0", "--engine-strict")
        assert code == ExitCodes.RESOLUTION_ERROR.value

    def test_error_on_warnings(self, manifest, capsys):
        code, _ = _run(capsys, "-m", str(manifest), "--error-on-warnings")
        # No --engine given: node cannot be checked, which is a warning.
        assert code == ExitCodes.EXIT_WARNINGS.value

    def test_add_dependency_creates_conflict(self, manifest, capsys):
        code, report = _run(capsys, "-m", str(manifest), "-e", "node=20.0.0", "--add", "react@^17.0.0")
        assert code == ExitCodes.RESOLUTION_ERROR.value
        peers = {p["peer"]: p for p in report["peers"]}
        assert peers["react"]["cause"] == "conflicting_constraints"

    def test_include_prerelease(self, manifest, capsys):
        code, report = _run(capsys, "-m", str(manifest), "-e", "node=20.0.0", "--include-prerelease")
        assert code == ExitCodes.SUCCESS.value
        peers = {p["peer"]: p for p in report["peers"]}
        assert peers["react"]["chosenVersion"] == "18.3.0-canary"

    def test_catalog_file_overrides_inline(self, manifest, tmp_path, capsys):
        catalog = tmp_path / "catalog.json"
        catalog.write_text(json.dumps({"react": ["18.2.1"]}), encoding="utf-8")
        _, report = _run(capsys, "-m", str(manifest), "-c", str(catalog), "-e", "node=20.0.0")
        peers = {p["peer"]: p for p in report["peers"]}
        assert peers["react"]["chosenVersion"] == "18.2.1"

    def test_output_file(self, manifest, tmp_path, capsys):
        out = tmp_path / "report.json"
        code, printed = _run(capsys, "-m", str(manifest), "-e", "node=20.0.0", "-o", str(out))
        assert code == ExitCodes.SUCCESS.value
        assert printed is None
        assert json.loads(out.read_text(encoding="utf-8"))["summary"]["resolved"] == 1

    def test_quiet(self, manifest, capsys):
        code, printed = _run(capsys, "-m", str(manifest), "-e", "node=20.0.0", "-q")
        assert code == ExitCodes.SUCCESS.value
        assert printed is None

    def test_missing_manifest(self, tmp_path, capsys):
        code, _ = _run(capsys, "-m", str(tmp_path / "nope.yml"))
        assert code == ExitCodes.FILE_ERROR.value

    def test_malformed_range_in_manifest(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"packages": {"a": {"peerDependencies": {"b": "^^1"}}}}), encoding="utf-8")
        code, _ = _run(capsys, "-m", str(path))
        assert code == ExitCodes.FILE_ERROR.value

    def test_bad_engine_argument(self, manifest, capsys):
        code, _ = _run(capsys, "-m", str(manifest), "-e", "node")
        assert code == ExitCodes.FILE_ERROR.value

    def test_config_file_applies(self, manifest, tmp_path, capsys):
        cfg = tmp_path / "peergate.yml"
        cfg.write_text("engines:\n  strict: true\n", encoding="utf-8")
        code, _ = _run(capsys, "-m", str(manifest), "-e", "node=16.0.0", "--config", str(cfg))
        assert code == ExitCodes.RESOLUTION_ERROR.value

    def test_missing_config_file(self, manifest, tmp_path, capsys):
        code, _ = _run(capsys, "-m", str(manifest), "--config", str(tmp_path / "missing.yml"))
        assert code == ExitCodes.FILE_ERROR.value


class TestConfig:
    """Config loading and CLI override precedence."""

    def test_load_yaml_config(self, tmp_path):
        path = tmp_path / "cfg.yml"
        path.write_text("resolver:\n  max_workers: 8\n", encoding="utf-8")
        assert _load_yaml_config(str(path)) == {"resolver": {"max_workers": 8}}

    def test_env_config(self, tmp_path, monkeypatch):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"catalog": {"cache_ttl": 5}}), encoding="utf-8")
        monkeypatch.setenv("PEERGATE_CONFIG", str(path))
        load_config()
        assert Constants.CATALOG_CACHE_TTL_SEC == 5

    def test_no_config_found(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert _load_yaml_config() == {}

    def test_default_file_in_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "peergate.yml").write_text("resolver:\n  include_prerelease: true\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        load_config()
        assert Constants.INCLUDE_PRERELEASE is True

    def test_non_mapping_config(self, tmp_path):
        path = tmp_path / "cfg.yml"
        path.write_text("- a\n", encoding="utf-8")
        with pytest.raises(ValueError):
            _load_yaml_config(str(path))

    def test_apply_config_ignores_invalid_values(self):
        before = Constants.RESOLVER_MAX_WORKERS
        apply_config({"resolver": {"max_workers": "many"}, "unknown": {"x": 1}})
        assert Constants.RESOLVER_MAX_WORKERS == before

    def test_cli_overrides_win(self):
        apply_config({"resolver": {"max_workers": 8}, "engines": {"strict": False}})
        apply_cli_overrides(SimpleNamespace(WORKERS=2, ENGINE_STRICT=True, INCLUDE_PRERELEASE=False))
        assert Constants.RESOLVER_MAX_WORKERS == 2
        assert Constants.ENGINE_STRICT is True

    def test_invalid_worker_count_ignored(self):
        apply_cli_overrides(SimpleNamespace(WORKERS=0, ENGINE_STRICT=False, INCLUDE_PRERELEASE=False))
        assert Constants.RESOLVER_MAX_WORKERS >= 1

    def test_parse_engine_args(self):
        assert parse_engine_args(["node=18.0.0", " npm = 9.1.0 "]) == {"node": "18.0.0", "npm": "9.1.0"}
        with pytest.raises(ValueError):
            parse_engine_args(["node="])

    def test_quoted_boolean_values(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"engines": {"strict": "false"}, "catalog": {"coerce": "no"}}), encoding="utf-8")
        Constants.ENGINE_STRICT = True
        load_config(str(path))
        assert Constants.ENGINE_STRICT is False
        assert Constants.CATALOG_COERCE is False

    def test_unrecognized_boolean_ignored(self):
        before = Constants.INCLUDE_PRERELEASE
        apply_config({"resolver": {"include_prerelease": "maybe"}})
        assert Constants.INCLUDE_PRERELEASE == before


class TestInlineCatalogShape:
    """Inline catalogs with the wrong shape are input errors."""

    @pytest.mark.parametrize("catalog", [["1.0.0"], {"react": "18.2.0"}, "react"])
    def test_bad_catalog_is_file_error(self, tmp_path, capsys, catalog):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({
            "packages": {"app": {}, "a": {"peerDependencies": {"react": "^18.0.0"}}},
            "catalog": catalog,
        }), encoding="utf-8")
        code, printed = _run(capsys, "-m", str(path))
        assert code == ExitCodes.FILE_ERROR.value
        assert printed is None
