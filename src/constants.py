"""Constants used in the project."""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    RESOLUTION_ERROR = 2
    EXIT_WARNINGS = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "PEERGATE_LOG_LEVEL"
    ENV_CONFIG = "PEERGATE_CONFIG"
    DEFAULT_CONFIG_FILES = ["peergate.yml", "peergate.yaml", ".peergate.yml"]

    # Parser limits
    MAX_VERSION_LENGTH = 256
    MAX_RANGE_LENGTH = 1024

    # Resolver tunables
    RESOLVER_MAX_WORKERS = 4
    INCLUDE_PRERELEASE = False

    # Engine checks: unsupported engines fail the run instead of warning
    ENGINE_STRICT = False

    # Catalog handling
    CATALOG_COERCE = True
    CATALOG_CACHE_TTL_SEC = 600


def _to_bool(value: Any) -> bool:
    """Interpret YAML/JSON booleans, including quoted ones such as "false"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "yes", "on", "1"):
            return True
        if text in ("false", "no", "off", "0"):
            return False
    raise ValueError(f"not a boolean: {value!r}")


# Config keys (section, key) -> Constants attribute and coercion
_CONFIG_KEYS = {
    ("resolver", "max_workers"): ("RESOLVER_MAX_WORKERS", int),
    ("resolver", "include_prerelease"): ("INCLUDE_PRERELEASE", _to_bool),
    ("engines", "strict"): ("ENGINE_STRICT", _to_bool),
    ("catalog", "coerce"): ("CATALOG_COERCE", _to_bool),
    ("catalog", "cache_ttl"): ("CATALOG_CACHE_TTL_SEC", int),
}


def _find_config_file(path: Optional[str] = None) -> Optional[str]:
    """Return the first config file found: explicit path, env var, then defaults."""
    if path:
        return path
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        return env_path
    for candidate in Constants.DEFAULT_CONFIG_FILES:
        if os.path.isfile(candidate):
            return candidate
    return None


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML (or JSON) configuration file.

    Args:
        path: Explicit config path; falls back to PEERGATE_CONFIG and the
            default file names in the working directory.

    Returns:
        Parsed configuration mapping, empty when no file is found.

    Raises:
        OSError: If an explicitly named file cannot be read.
        ValueError: If the file does not contain a mapping.
    """
    config_path = _find_config_file(path)
    if not config_path:
        return {}
    if not os.path.isfile(config_path):
        if path:
            raise OSError(f"Config file not found: {config_path}")
        logger.warning("Config file not found: %s", config_path)
        return {}

    with open(config_path, "r", encoding="utf-8") as fh:
        if config_path.lower().endswith(".json"):
            data = json.load(fh)
        else:
            data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    logger.debug("Loaded config from %s", config_path)
    return data


def apply_config(cfg: Dict[str, Any]) -> None:
    """Copy recognized configuration keys onto Constants."""
    for (section, key), (attr, cast) in _CONFIG_KEYS.items():
        block = cfg.get(section)
        if not isinstance(block, dict) or key not in block:
            continue
        value = block[key]
        try:
            setattr(Constants, attr, cast(value))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid config value %s.%s=%r", section, key, value)
