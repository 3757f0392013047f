"""
Report Builder — Envelope In, Stamped Report Out

An envelope is {"analysis_input": {...}, "narrative_text": {...}, "meta": {...}}.
build_report() runs the pipeline on analysis_input, prepends a meta
block and overlays the RSL narrative text (summary and dimensions)
supplied with the envelope. Narrative text is carried, never generated.

Usage:
    from neuprint.report import build_report
    from neuprint.fixtures import load_fixture
    report = build_report(load_fixture())
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from neuprint.logging import report_context
from neuprint.meta import build_meta
from neuprint.pipeline import derive

logger = logging.getLogger(__name__)


def overlay_narrative(rsl: dict, narrative: Optional[dict]) -> dict:
    """RSL section with summary/dimensions taken from narrative text where given."""
    narrative = narrative if isinstance(narrative, dict) else {}
    summary_src = narrative.get("summary") if isinstance(narrative.get("summary"), dict) else {}
    existing = rsl.get("summary") if isinstance(rsl.get("summary"), dict) else {}

    dimensions = narrative.get("dimensions")
    if not isinstance(dimensions, list):
        dimensions = rsl.get("dimensions", [])

    return {
        **rsl,
        "summary": {
            "one_line": summary_src.get("one_line") or existing.get("one_line", ""),
            "paragraph": summary_src.get("paragraph") or existing.get("paragraph", ""),
        },
        "dimensions": dimensions,
    }


def build_report(envelope: Any) -> dict:
    """Run the pipeline on an envelope and return the stamped report."""
    envelope = envelope if isinstance(envelope, dict) else {}
    analysis_input = envelope.get("analysis_input", envelope)
    narrative = envelope.get("narrative_text") or {}

    start = time.perf_counter()
    meta = build_meta(envelope.get("meta"))
    with report_context(verification_id=meta["verification_id"]):
        derived = derive(analysis_input)

    report = {"meta": meta, **derived}
    report["rsl"] = overlay_narrative(derived.get("rsl", {}), narrative.get("rsl"))

    logger.info(
        "Report built",
        extra={
            "verification_id": meta["verification_id"],
            "rsl_level": report["rsl"].get("level"),
            "final_type": report.get("cff", {}).get("final_type", {}).get("code"),
            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
        },
    )
    return report
