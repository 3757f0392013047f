"""
API Schemas — Request and Response Models

Pydantic models for the NeuPrint API. Report sections stay plain dicts:
their shape is owned by the scorers, not by the HTTP layer.
"""

from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel, Field


# ============================================================
# ANALYZE
# ============================================================

class AnalyzeRequest(BaseModel):
    """POST /analyze request body. Every field is optional."""
    analysis_input: Optional[dict[str, Any]] = Field(
        None, description="Analysis input record. The bundled fixture is used when omitted.")
    narrative_text: Optional[dict[str, Any]] = Field(
        None, description="Narrative text to overlay onto the RSL section.")
    meta: Optional[dict[str, Any]] = Field(
        None, description="Request meta, e.g. {\"input_language\": \"EN\"}.")

    model_config = {"json_schema_extra": {"examples": [
        {"analysis_input": {"raw_features": {"layer_0": {"units": 6, "claims": 3, "reasons": 3, "evidence": 2}}},
         "meta": {"input_language": "EN"}},
    ]}}


class ReportMeta(BaseModel):
    input_language: str
    generated_at_utc: str
    verify_url: str
    verification_id: str = Field(..., pattern=r"^NP-\d{4}-\d{4}-\d{4}$")


class ReportResponse(BaseModel):
    """POST /analyze response body."""
    meta: ReportMeta
    rsl: dict[str, Any]
    cff: dict[str, Any]
    rc: dict[str, Any]
    rfs: dict[str, Any]
    errors: Optional[dict[str, Any]] = None


# ============================================================
# HEALTH
# ============================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    api_version: str
    auth_enabled: bool
    rate_limit_enabled: bool
