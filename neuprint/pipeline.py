"""
Pipeline — Four Scorers, One Report

Runs the scorers in a fixed order and deep-merges their sections:

    RSL -> CFF -> RC (sees CFF) -> RFS style (sees CFF)
                                -> RFS roles (sees CFF + RSL)

Each step runs inside a SectionResult. Invalid role configurations
fail only the role-ranking step: the rest of the report, including the
RFS style block, is still produced and the failure is listed under
"errors". Any other exception is a bug and propagates.

Usage:
    from neuprint.pipeline import derive
    report = derive({"analysis_input": {...}})
    report["rsl"]["level"], report["cff"]["final_type"]["code"]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from neuprint.cff import derive_cff
from neuprint.errors import RoleConfigError
from neuprint.features import AnalysisInput
from neuprint.logging import report_context
from neuprint.merge import deep_merge_all
from neuprint.rc import derive_rc
from neuprint.rfs import derive_rfs_roles, derive_rfs_style
from neuprint.rsl import derive_rsl

logger = logging.getLogger(__name__)

# Exceptions a step may fail with without aborting the report
RECOVERABLE = (RoleConfigError,)


@dataclass
class SectionResult:
    """Outcome of one pipeline step."""
    name: str
    ok: bool
    data: dict = field(default_factory=dict)
    error: Optional[Exception] = None

    @property
    def error_info(self) -> Optional[dict]:
        if self.error is None:
            return None
        return {"type": type(self.error).__name__, "message": str(self.error)}


def run_section(name: str, fn: Callable[[], dict]) -> SectionResult:
    """Run one step; records logged inside it carry its section and step."""
    with report_context(section=name.split("_")[0], step=name):
        try:
            return SectionResult(name=name, ok=True, data=fn() or {})
        except RECOVERABLE as e:
            logger.warning(
                f"Section {name} failed: {e}",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return SectionResult(name=name, ok=False, error=e)


def run_sections(payload: Any) -> list[SectionResult]:
    """All steps, in order, with their individual outcomes."""
    ai = AnalysisInput.coerce(payload)

    rsl = run_section("rsl", lambda: derive_rsl(ai))
    cff = run_section("cff", lambda: derive_cff(ai))
    cff_section = cff.data.get("cff")
    rsl_section = rsl.data.get("rsl")

    rc = run_section("rc", lambda: derive_rc(ai, cff_section))
    style = run_section("rfs", lambda: derive_rfs_style(ai, cff_section))
    roles = run_section("rfs_roles", lambda: derive_rfs_roles(ai, rsl_section))

    return [rsl, cff, rc, style, roles]


def derive(payload: Any) -> dict:
    """Full report: {"rsl", "cff", "rc", "rfs"} plus "errors" when a step failed."""
    results = run_sections(payload)
    report = deep_merge_all(*(r.data for r in results))

    errors = {r.name: r.error_info for r in results if not r.ok}
    if errors:
        report["errors"] = errors
    return report
