"""PeerGate - peer dependency and engine compatibility resolver.

    Returns:
        int: Exit code
"""
import copy
import json
import logging
import os
import sys

import yaml

from args import parse_args
from cli_config import apply_cli_overrides, load_config, parse_engine_args
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from versioning.catalog import StaticCatalog
from versioning.engines import check_engines
from versioning.errors import VersioningError
from versioning.graph import graph_from_manifest
from versioning.parser import tokenize_spec
from versioning.report import build_report, exit_code_for
from versioning.resolver import resolve

logger = logging.getLogger(__name__)


def load_document(path):
    """Loads a YAML or JSON mapping from disk.

    Args:
        path (str): File path.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file does not hold a mapping.

    Returns:
        dict: Parsed document.
    """
    with open(path, encoding="utf-8") as fh:
        if path.lower().endswith(".json"):
            data = json.load(fh)
        else:
            data = yaml.safe_load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping")
    return data


def add_root_dependencies(doc, tokens):
    """Returns a copy of the manifest with NAME@RANGE tokens added to the root's dependencies."""
    if not tokens:
        return doc
    doc = copy.deepcopy(doc)
    packages = doc.setdefault("packages", {})
    root = doc.get("root") or next(iter(packages), None)
    if root is None:
        raise ValueError("Manifest has no root package to add dependencies to")
    root_entry = packages.setdefault(root, {}) or {}
    packages[root] = root_entry
    deps = root_entry.setdefault("dependencies", {}) or {}
    root_entry["dependencies"] = deps
    for token in tokens:
        name, spec = tokenize_spec(token)
        deps[name] = spec or "*"
    return doc


def required_engines(doc):
    """Collects engine requirements from the manifest and its root package."""
    engines = {}
    packages = doc.get("packages") or {}
    root = doc.get("root") or next(iter(packages), None)
    root_entry = packages.get(root) or {}
    engines.update(root_entry.get("engines") or {})
    engines.update(doc.get("engines") or {})
    return {str(k): str(v) for k, v in engines.items()}


def export_json(report, path):
    """Exports the report to a JSON file.

    Args:
        report (dict): Report built by build_report.
        path (str): File path to export the JSON.

    Returns:
        bool: True when the file was written.
    """
    try:
        with open(path, "w", encoding="utf-8") as file:
            json.dump(report, file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
        return True
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        return False


def _setup_logging(args):
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug("CLI start", extra=extra_context(event="function_entry", component="cli", action="main"))

    try:
        load_config(args.CONFIG)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Unable to load config: %s", e)
        return ExitCodes.FILE_ERROR.value
    apply_cli_overrides(args)

    try:
        doc = add_root_dependencies(load_document(args.MANIFEST), args.ADD)
        graph = graph_from_manifest(doc)
        if args.CATALOG:
            catalog = StaticCatalog.from_file(args.CATALOG)
        else:
            catalog = StaticCatalog(doc.get("catalog") or {})
        current_engines = parse_engine_args(args.ENGINES)
    except (OSError, ValueError, yaml.YAMLError) as e:
        # VersioningError is a ValueError: malformed ranges land here too.
        kind = "Invalid input" if isinstance(e, VersioningError) else "Unable to load input"
        logger.error("%s: %s", kind, e)
        return ExitCodes.FILE_ERROR.value

    logger.info("Loaded graph with %d package(s), root %s", len(graph.nodes), graph.root)

    engines = required_engines(doc)
    engine_results = check_engines(current_engines, engines, include_prerelease=Constants.INCLUDE_PRERELEASE)

    results = resolve(
        graph,
        catalog,
        max_workers=Constants.RESOLVER_MAX_WORKERS,
        include_prerelease=Constants.INCLUDE_PRERELEASE,
    )
    report = build_report(results, engine_results, engine_strict=Constants.ENGINE_STRICT)

    summary = report["summary"]
    logger.info(
        "Resolved %d, unsatisfiable %d, skipped %d peer(s)",
        summary["resolved"], summary["unsatisfiable"], summary["skipped"],
    )
    for message in summary["warnings"]:
        logger.warning(message)
    for message in summary["errors"]:
        logger.error(message)

    if args.OUTPUT:
        if not export_json(report, args.OUTPUT):
            return ExitCodes.FILE_ERROR.value
    elif not args.QUIET:
        print(json.dumps(report, indent=2))

    return exit_code_for(report, error_on_warnings=args.ERROR_ON_WARNINGS)


if __name__ == "__main__":
    sys.exit(main())
