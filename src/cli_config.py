"""CLI configuration overrides for runtime tunables.

Precedence, lowest to highest: Constants defaults, config file, CLI flags.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from constants import Constants, _load_yaml_config, apply_config

logger = logging.getLogger(__name__)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the config file (explicit path, PEERGATE_CONFIG or defaults) onto Constants."""
    cfg = _load_yaml_config(path)
    apply_config(cfg)
    return cfg


def apply_cli_overrides(args) -> None:
    """Apply CLI flags over config-file values."""
    if getattr(args, "WORKERS", None) is not None:
        if args.WORKERS < 1:
            logger.warning("Ignoring --workers %s; at least one worker is required", args.WORKERS)
        else:
            Constants.RESOLVER_MAX_WORKERS = int(args.WORKERS)
    if getattr(args, "ENGINE_STRICT", False):
        Constants.ENGINE_STRICT = True
    if getattr(args, "INCLUDE_PRERELEASE", False):
        Constants.INCLUDE_PRERELEASE = True


def parse_engine_args(values) -> Dict[str, str]:
    """Parse repeated ``NAME=VERSION`` arguments into a mapping.

    Raises:
        ValueError: If an entry is not of the form NAME=VERSION.
    """
    engines: Dict[str, str] = {}
    for value in values or []:
        name, sep, version = value.partition("=")
        if not sep or not name.strip() or not version.strip():
            raise ValueError(f"Invalid engine {value!r}; expected NAME=VERSION")
        engines[name.strip()] = version.strip()
    return engines
