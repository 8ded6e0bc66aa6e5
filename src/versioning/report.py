"""Structured report for resolution and engine-check results.

This is the boundary where caller policy (engine-strict, error-on-warnings)
turns advisory results into errors and exit codes.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from constants import ExitCodes

from .models import EngineCheckResult, EngineStatus, ResolutionResult, ResolutionStatus


def build_report(
    results: Mapping[str, ResolutionResult],
    engine_results: Optional[Sequence[EngineCheckResult]] = None,
    engine_strict: bool = False,
) -> Dict[str, Any]:
    """Build a JSON-ready report.

    Args:
        results: Peer resolution results keyed by peer name.
        engine_results: Engine check results, if any were run.
        engine_strict: Count unsupported engines as errors instead of warnings.

    Returns:
        Dict with ``peers``, ``engines`` and ``summary`` sections.
    """
    engine_results = list(engine_results or [])
    warnings: List[str] = []
    errors: List[str] = []

    for result in results.values():
        if result.status is ResolutionStatus.UNSATISFIABLE:
            errors.append(result.error or f"Unable to resolve {result.peer}")
        elif result.installed_version is not None and result.chosen_version != result.installed_version:
            warnings.append(
                f"Installed {result.peer}@{result.installed_version} does not satisfy its requirements; "
                f"{result.chosen_version} was resolved"
            )
        for req in result.unmet_optional:
            warnings.append(
                f"{req.requester} optionally requires {result.peer}@{req.range.raw or req.range} "
                f"but {result.chosen_version} was resolved"
            )

    for check in engine_results:
        if check.status is EngineStatus.OK:
            continue
        if check.status is EngineStatus.UNSUPPORTED:
            message = f"Unsupported engine {check.tool}: wanted {check.required}, current {check.current}"
        else:
            message = check.error or f"Unable to check engine {check.tool}"
        (errors if engine_strict else warnings).append(message)

    statuses = [r.status for r in results.values()]
    return {
        "peers": [r.to_dict() for r in results.values()],
        "engines": [c.to_dict() for c in engine_results],
        "summary": {
            "resolved": statuses.count(ResolutionStatus.RESOLVED),
            "unsatisfiable": statuses.count(ResolutionStatus.UNSATISFIABLE),
            "skipped": statuses.count(ResolutionStatus.SKIPPED),
            "engineStrict": engine_strict,
            "warnings": warnings,
            "errors": errors,
        },
    }


def exit_code_for(report: Mapping[str, Any], error_on_warnings: bool = False) -> int:
    """Map a report to a process exit code."""
    summary = report.get("summary", {})
    if summary.get("errors"):
        return ExitCodes.RESOLUTION_ERROR.value
    if error_on_warnings and summary.get("warnings"):
        return ExitCodes.EXIT_WARNINGS.value
    return ExitCodes.SUCCESS.value
