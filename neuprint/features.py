"""
Input Extraction — Loose Payload to Typed Features

Every scorer reads the same typed view of a request. This module is the
single place that walks the loosely-shaped external input:

  - unwraps an optional {"analysis_input": {...}} envelope
  - resolves the legacy raw-feature aliases (raw_features, raw, ...)
  - accepts the layered shape (layer_0..layer_3, backend_reserved) or a
    flat record with the same field names
  - coerces every count to a non-negative float
  - drops per-unit arrays whose length doesn't match the unit count

Nothing here raises on malformed input. Missing data becomes a zero,
an empty list, or None where absence carries meaning (side signals,
overrides).

Usage:
    from neuprint.features import AnalysisInput
    ai = AnalysisInput.from_payload(payload)
    ai.raw.units, ai.raw.kpf_sim, ai.role_configs
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from neuprint.normalize import safe_count, to_optional_float


RAW_ALIASES = ("raw_features", "raw", "rawFeatures", "raw_features_v1", "raw_features_v2")
RUBRIC_ALIASES = ("rsl_rubric", "rubric", "rslRubric")

PER_UNIT_KEYS = (
    "claims", "reasons", "evidence", "sub_claims", "warrants",
    "counterpoints", "refutations", "transitions", "transition_ok",
    "revisions", "revision_depth", "belief_change",
)

STRUCTURE_TYPES = ("linear", "hierarchical", "networked")

# Flat field -> layer it lives under in the canonical layered shape
_LAYER_OF = {
    "units": "layer_0", "claims": "layer_0", "reasons": "layer_0", "evidence": "layer_0",
    "sub_claims": "layer_1", "warrants": "layer_1", "counterpoints": "layer_1",
    "refutations": "layer_1", "structure_type": "layer_1",
    "transitions": "layer_2", "transition_ok": "layer_2", "revisions": "layer_2",
    "revision_depth_sum": "layer_2", "belief_change": "layer_2",
    "intent_markers": "layer_3", "drift_segments": "layer_3", "hedges": "layer_3",
    "loops": "layer_3", "self_regulation_signals": "layer_3",
}


# ============================================================
# RAW FEATURES
# ============================================================

@dataclass(frozen=True)
class RawFeatures:
    """Structural counts for one analyzed text. All counts are >= 0."""
    units: float = 0.0
    claims: float = 0.0
    reasons: float = 0.0
    evidence: float = 0.0
    sub_claims: float = 0.0
    warrants: float = 0.0
    counterpoints: float = 0.0
    refutations: float = 0.0
    transitions: float = 0.0
    transition_ok: float = 0.0
    revisions: float = 0.0
    revision_depth_sum: float = 0.0
    belief_change: bool = False
    intent_markers: float = 0.0
    drift_segments: float = 0.0
    hedges: float = 0.0
    loops: float = 0.0
    self_regulation_signals: float = 0.0
    adjacency_links: float = 0.0
    structure_type: str = "linear"
    evidence_types: frozenset[str] = frozenset()
    # Trusted only when len == units; otherwise empty
    unit_lengths: tuple[float, ...] = ()
    per_unit: Mapping[str, tuple[float, ...]] = field(default_factory=dict)
    # Side signals; None means "not supplied"
    kpf_sim: Optional[float] = None
    tps_h: Optional[float] = None

    @property
    def unit_count(self) -> int:
        """Units floored and held at >= 1, for use as a divisor."""
        return max(1, int(math.floor(self.units)))

    def per_unit_series(self, key: str) -> tuple[float, ...]:
        return tuple(self.per_unit.get(key, ()))

    @property
    def has_per_unit(self) -> bool:
        return any(len(v) > 0 for v in self.per_unit.values())

    @classmethod
    def from_mapping(cls, raw: Any) -> "RawFeatures":
        """Build from a layered or flat mapping. Non-mappings give all-zero features."""
        if not isinstance(raw, Mapping):
            return cls()

        def pick(name: str):
            layer = raw.get(_LAYER_OF.get(name, ""), None)
            if isinstance(layer, Mapping) and name in layer:
                return layer[name]
            return raw.get(name)

        counts = {
            name: safe_count(pick(name))
            for name in _LAYER_OF
            if name not in ("structure_type", "belief_change")
        }

        structure_type = pick("structure_type")
        if not isinstance(structure_type, str) or structure_type not in STRUCTURE_TYPES:
            structure_type = "linear"

        units = counts["units"]
        n_units = int(math.floor(units))
        layer_0 = raw.get("layer_0") if isinstance(raw.get("layer_0"), Mapping) else {}

        unit_lengths = _series(layer_0.get("unit_lengths", raw.get("unit_lengths")), n_units)
        per_unit_src = layer_0.get("per_unit", raw.get("per_unit"))
        per_unit: dict[str, tuple[float, ...]] = {}
        if isinstance(per_unit_src, Mapping):
            for key in PER_UNIT_KEYS:
                series = _series(per_unit_src.get(key), n_units)
                if series:
                    per_unit[key] = series

        reserved = raw.get("backend_reserved")
        if not isinstance(reserved, Mapping):
            reserved = {}
        kpf = to_optional_float(reserved.get("kpf_sim", raw.get("kpf_sim")))
        tps = to_optional_float(reserved.get("tps_h", raw.get("tps_h")))

        return cls(
            structure_type=structure_type,
            belief_change=bool(pick("belief_change")),
            adjacency_links=safe_count(raw.get("adjacency_links")),
            evidence_types=_evidence_types(raw.get("evidence_types")),
            unit_lengths=unit_lengths,
            per_unit=per_unit,
            kpf_sim=kpf,
            tps_h=tps,
            **counts,
        )


def _series(values: Any, expected_len: int) -> tuple[float, ...]:
    """Per-unit array, or () when absent or its length disagrees with units."""
    if not isinstance(values, (list, tuple)) or len(values) != expected_len:
        return ()
    return tuple(safe_count(v) for v in values)


def _evidence_types(value: Any) -> frozenset[str]:
    """Map form counts keys with a positive count; list form is a set."""
    if isinstance(value, Mapping):
        return frozenset(str(k) for k, v in value.items() if safe_count(v) > 0)
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(str(v) for v in value if v is not None and str(v))
    return frozenset()


# ============================================================
# ANALYSIS INPUT
# ============================================================

@dataclass(frozen=True)
class AnalysisInput:
    """Typed view of one analysis request."""
    raw: RawFeatures = field(default_factory=RawFeatures)
    has_raw: bool = False
    rubric: Optional[dict[str, float]] = None
    evidence_link_rate: Optional[float] = None
    indicators: dict[str, Any] = field(default_factory=dict)
    cohort_fri_list: tuple[float, ...] = ()
    active_signal_ids: tuple[str, ...] = ()
    rc_model: Optional[dict[str, Any]] = None
    role_configs: tuple[dict[str, Any], ...] = ()
    role_fit: Optional[dict[str, Any]] = None
    rsl_proxies: dict[str, float] = field(default_factory=dict)

    @classmethod
    def coerce(cls, value: Any) -> "AnalysisInput":
        if isinstance(value, AnalysisInput):
            return value
        return cls.from_payload(value)

    @classmethod
    def from_payload(cls, payload: Any) -> "AnalysisInput":
        ai = unwrap_analysis_input(payload)

        raw_src = None
        for alias in RAW_ALIASES:
            if isinstance(ai.get(alias), Mapping):
                raw_src = ai[alias]
                break

        cff_block = ai.get("cff") if isinstance(ai.get("cff"), Mapping) else {}
        rc_block = ai.get("rc") if isinstance(ai.get("rc"), Mapping) else {}

        indicators = cff_block.get("indicators")
        signal_ids = rc_block.get("active_signals", ai.get("active_signal_ids"))
        rc_model = rc_block.get("model", ai.get("rc_model"))
        role_configs = ai.get("role_configs")
        role_fit = ai.get("role_fit")
        proxies = ai.get("rsl_proxies")

        return cls(
            raw=RawFeatures.from_mapping(raw_src),
            has_raw=raw_src is not None,
            rubric=_rubric_override(ai),
            evidence_link_rate=to_optional_float(ai.get("evidence_link_rate")),
            indicators=dict(indicators) if isinstance(indicators, Mapping) else {},
            cohort_fri_list=_peer_list(ai.get("cohort_fri_list")),
            active_signal_ids=tuple(
                str(s) for s in signal_ids
            ) if isinstance(signal_ids, (list, tuple)) else (),
            rc_model=dict(rc_model) if isinstance(rc_model, Mapping) else None,
            role_configs=tuple(
                dict(c) for c in role_configs if isinstance(c, Mapping)
            ) if isinstance(role_configs, (list, tuple)) else (),
            role_fit=dict(role_fit) if isinstance(role_fit, Mapping) else None,
            rsl_proxies={
                k: v for k, v in (
                    (k, to_optional_float(proxies.get(k)))
                    for k in ("rsl_hypothesis", "rsl_expansion")
                ) if v is not None
            } if isinstance(proxies, Mapping) else {},
        )


def unwrap_analysis_input(payload: Any) -> dict:
    """Accept {"analysis_input": {...}} or the inner record directly."""
    if not isinstance(payload, Mapping):
        return {}
    inner = payload.get("analysis_input")
    if isinstance(inner, Mapping):
        return dict(inner)
    return dict(payload)


def _rubric_override(ai: Mapping) -> Optional[dict[str, float]]:
    """Explicit 0..5 rubric, if the caller supplied one."""
    for alias in RUBRIC_ALIASES:
        src = ai.get(alias)
        if not isinstance(src, Mapping):
            continue
        out = {}
        for dim in ("coherence", "structure", "evaluation", "integration"):
            v = src.get(dim, src.get(f"{dim}_rubric_0to5"))
            out[dim] = to_optional_float(v) or 0.0
        return out
    return None


def _peer_list(values: Any) -> tuple[float, ...]:
    """Peer scores; unusable entries count as 0 and stay in the denominator."""
    if not isinstance(values, (list, tuple)):
        return ()
    return tuple(to_optional_float(v) or 0.0 for v in values)
