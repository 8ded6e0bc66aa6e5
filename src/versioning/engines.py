"""Runtime tool (engine) compatibility checks.

A mismatch is returned as an UNSUPPORTED result rather than raised, so that a
caller checking several tools at once sees every mismatch. Whether a mismatch
is fatal is decided by the reporting layer.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Union

from common.logging_utils import extra_context, is_debug_enabled

from .errors import VersioningError
from .evaluator import satisfies
from .models import EngineCheckResult, EngineStatus, Range, SemanticVersion
from .parser import ensure_range
from .version import ensure_version

logger = logging.getLogger(__name__)


def check_engine(
    current: Union[str, SemanticVersion],
    required: Union[str, Range],
    tool: Optional[str] = None,
    include_prerelease: bool = False,
) -> EngineCheckResult:
    """Check a tool's current version against a required range.

    Args:
        current: Current tool version; text is parsed loosely (``v18.17.0``).
        required: Declared requirement, e.g. ``">=18"``.
        tool: Tool name for reporting (``node``, ``npm``).
        include_prerelease: Let prerelease tool builds match plain ranges.

    Returns:
        EngineCheckResult with status OK or UNSUPPORTED.

    Raises:
        MalformedVersion: If ``current`` cannot be parsed.
        MalformedRange: If ``required`` cannot be parsed.
    """
    version = ensure_version(current, loose=True)
    requirement = ensure_range(required)
    required_text = requirement.raw or str(requirement)

    if satisfies(version, requirement, include_prerelease=include_prerelease):
        status = EngineStatus.OK
    else:
        status = EngineStatus.UNSUPPORTED

    if is_debug_enabled(logger):
        logger.debug(
            "Engine check",
            extra=extra_context(
                event="decision", component="engines", action="check_engine",
                outcome=status.value, target=tool, current=str(version), required=required_text,
            ),
        )
    return EngineCheckResult(tool=tool, status=status, current=str(version), required=required_text)


def check_engines(
    current_versions: Mapping[str, Union[str, SemanticVersion, None]],
    requirements: Mapping[str, Union[str, Range]],
    include_prerelease: bool = False,
) -> List[EngineCheckResult]:
    """Check every declared engine requirement, collecting all outcomes.

    Tools without a known current version and malformed inputs produce
    INVALID entries instead of aborting the batch.
    """
    results: List[EngineCheckResult] = []
    for tool, required in requirements.items():
        current = current_versions.get(tool)
        required_text = required if isinstance(required, str) else (required.raw or str(required))
        if current is None:
            results.append(EngineCheckResult(
                tool=tool, status=EngineStatus.INVALID, current=None, required=required_text,
                error=f"No current version known for {tool}",
            ))
            continue
        try:
            results.append(check_engine(current, required, tool=tool, include_prerelease=include_prerelease))
        except VersioningError as e:
            logger.warning("Engine check for %s failed: %s", tool, e)
            results.append(EngineCheckResult(
                tool=tool, status=EngineStatus.INVALID, current=str(current), required=required_text,
                error=str(e),
            ))
    return results
