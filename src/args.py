"""Argument parsing functionality for PeerGate."""

import argparse


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="peergate",
        description=(
            "PeerGate - Peer dependency and engine compatibility resolver"
        ),
        add_help=True,
    )

    parser.add_argument("-m", "--manifest",
                        dest="MANIFEST",
                        help="YAML or JSON dependency graph (root, packages, optional catalog/engines)",
                        action="store", type=str,
                        required=True)
    parser.add_argument("-c", "--catalog",
                        dest="CATALOG",
                        help="YAML or JSON file mapping package names to available versions",
                        action="store", type=str)
    parser.add_argument("-a", "--add",
                        dest="ADD",
                        help="Add NAME@RANGE to the root package's dependencies before resolving (repeatable)",
                        action="append", type=str,
                        default=[])
    parser.add_argument("-e", "--engine",
                        dest="ENGINES",
                        help="Current tool version as NAME=VERSION, i.e: node=18.17.0 (repeatable)",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--engine-strict",
                        dest="ENGINE_STRICT",
                        help="Treat unsupported engines as errors instead of warnings.",
                        action="store_true")
    parser.add_argument("--include-prerelease",
                        dest="INCLUDE_PRERELEASE",
                        help="Allow prerelease versions to satisfy plain ranges.",
                        action="store_true")
    parser.add_argument("-w", "--workers",
                        dest="WORKERS",
                        help="Worker threads used to resolve peers in parallel",
                        action="store", type=int)
    parser.add_argument("--config",
                        dest="CONFIG",
                        help="Path to a YAML or JSON configuration file",
                        action="store", type=str)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output JSON report",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--error-on-warnings",
                        dest="ERROR_ON_WARNINGS",
                        help="Exit with a non-zero status code if warnings are present.",
                        action="store_true")
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")

    return parser.parse_args(argv)
