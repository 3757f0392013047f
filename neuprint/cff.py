"""
CFF — Cognitive Fingerprint Scorer

Builds the CFF section of the report in three layers:

  1. Indicators: six structural indicators (AAS, CTF, RMD, RDX, EDS, IFD)
     computed from raw counts, plus two optional side signals
     (KPF-Sim, TPS-H) that only the caller can supply
  2. Observed patterns: eight profile scores, thresholded and ranked
     into a primary/secondary pattern
  3. Final type: a track (Human / Hybrid / AI) chosen from the side
     signals, then the first satisfied rule set within that track

Indicator statuses follow a fixed vocabulary: "Active" scores take part
in classification, "Excluded" and "Missing" ones don't.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from neuprint.archetypes import (
    FINAL_TYPES,
    OBSERVED_PROFILES,
    PROFILE_BY_CODE,
    type_interpretation,
)
from neuprint.config import settings
from neuprint.features import AnalysisInput, RawFeatures
from neuprint.normalize import (
    average,
    clamp,
    clamp01,
    round2,
    safe_div,
    to_optional_float,
    weighted_average,
)

logger = logging.getLogger(__name__)


# ============================================================
# INDICATORS
# ============================================================

CORE_CODES = ("AAS", "CTF", "RMD", "RDX", "EDS", "IFD")
SIDE_CODES = ("KPF-Sim", "TPS-H")
INDICATOR_CODES = CORE_CODES + SIDE_CODES
STATUSES = ("Active", "Excluded", "Missing")

STRUCTURE_WEIGHTS = {"linear": 0.3, "hierarchical": 0.6, "networked": 1.0}

# Accepts "kpf_sim", "KPF-SIM", "tps_h", ... as override keys
_CODE_LOOKUP = {c.upper().replace("_", "-"): c for c in INDICATOR_CODES}


@dataclass(frozen=True)
class Indicator:
    score: Optional[float]
    status: str = "Active"

    def as_dict(self) -> dict:
        return {
            "score": None if self.score is None else round2(self.score),
            "status": self.status,
        }


def compute_cff6(raw: RawFeatures) -> dict[str, float]:
    """The six structural indicators, each clamped to [0, 1]."""
    units = raw.unit_count
    claims = raw.claims

    aas = (
        0.4 * safe_div(raw.sub_claims, claims)
        + 0.4 * safe_div(raw.warrants, claims)
        + 0.2 * STRUCTURE_WEIGHTS.get(raw.structure_type, 0.3)
    )
    ctf = (
        0.6 * safe_div(raw.transitions, units)
        + 0.4 * safe_div(raw.transition_ok, raw.transitions)
    )
    rmd = 0.5 + (
        safe_div(raw.reasons, units)
        - safe_div(raw.hedges + raw.loops, units)
    )
    rdx = (
        0.7 * safe_div(raw.revision_depth_sum, raw.revisions)
        + (0.2 if raw.belief_change else 0.0)
    )
    eds = (
        0.6 * safe_div(len(raw.evidence_types), 4)
        + 0.4 * safe_div(raw.evidence, claims)
    )
    ifd = (1.0 if raw.intent_markers > 0 else 0.5) - safe_div(raw.drift_segments, units)

    return {
        "AAS": clamp01(aas),
        "CTF": clamp01(ctf),
        "RMD": clamp01(rmd),
        "RDX": clamp01(rdx),
        "EDS": clamp01(eds),
        "IFD": clamp01(ifd),
    }


def compute_cff8(raw: RawFeatures) -> dict[str, float]:
    """CFF6 plus side signals, with a neutral 0.5 where a signal is missing."""
    out = compute_cff6(raw)
    out["KPF_SIM"] = 0.5 if raw.kpf_sim is None else clamp01(raw.kpf_sim)
    out["TPS_H"] = 0.5 if raw.tps_h is None else clamp01(_normalize_tps(raw.tps_h))
    return out


def _normalize_tps(x: float) -> float:
    """TPS-H may arrive as a percentage."""
    return x / 100 if x > 1.01 else x


def build_indicators(raw: RawFeatures, overrides: Optional[dict] = None) -> dict[str, Indicator]:
    """
    Computed indicators, with caller overrides applied on top.

    Every score lands in [0, 1]: a percentage TPS-H is divided by 100
    and anything else out of range is clamped, matching the radar.
    """
    cff8 = compute_cff8(raw)
    indicators = {code: Indicator(cff8[code]) for code in CORE_CODES}
    indicators["KPF-Sim"] = (
        Indicator(None, "Missing") if raw.kpf_sim is None else Indicator(cff8["KPF_SIM"])
    )
    indicators["TPS-H"] = (
        Indicator(None, "Missing") if raw.tps_h is None else Indicator(cff8["TPS_H"])
    )

    for key, value in (overrides or {}).items():
        code = _CODE_LOOKUP.get(str(key).upper().replace("_", "-"))
        if code is None:
            continue
        ind = _parse_indicator(value)
        if ind.score is not None:
            ind = Indicator(_bounded(code, ind.score), ind.status)
        indicators[code] = ind

    return indicators


def _bounded(code: str, x: float) -> float:
    return clamp01(_normalize_tps(x) if code == "TPS-H" else x)


def _parse_indicator(value: Any) -> Indicator:
    if isinstance(value, dict):
        score = to_optional_float(value.get("score"))
        status = value.get("status")
        if status not in STATUSES:
            status = "Active" if score is not None else "Missing"
        return Indicator(score, status)
    score = to_optional_float(value)
    return Indicator(score, "Active" if score is not None else "Missing")


def active_score(indicators: dict[str, Indicator], code: str) -> Optional[float]:
    """Score of an Active indicator, clamped; None otherwise."""
    ind = indicators.get(code)
    if ind is None or ind.status != "Active" or ind.score is None:
        return None
    return _bounded(code, ind.score)


def radar_output(indicators: dict[str, Indicator]) -> dict:
    """labels + values_0to1 for the radar chart; absent scores read "N/A"."""
    values = []
    for code in INDICATOR_CODES:
        ind = indicators.get(code)
        if ind is None or ind.score is None:
            values.append("N/A")
            continue
        values.append(round2(_bounded(code, ind.score)))
    return {"labels": list(INDICATOR_CODES), "values_0to1": values}


# ============================================================
# CORE AXES
# ============================================================

@dataclass(frozen=True)
class CoreAxes:
    AAS: Optional[float] = None
    CTF: Optional[float] = None
    RMD: Optional[float] = None
    RDX: Optional[float] = None
    EDS: Optional[float] = None
    IFD: Optional[float] = None
    KPF: Optional[float] = None
    TPS: Optional[float] = None

    @classmethod
    def from_indicators(cls, indicators: dict[str, Indicator]) -> "CoreAxes":
        return cls(
            **{code: active_score(indicators, code) for code in CORE_CODES},
            KPF=active_score(indicators, "KPF-Sim"),
            TPS=active_score(indicators, "TPS-H"),
        )

    @property
    def analyticity(self) -> Optional[float]:
        return average(self.AAS, self.EDS)

    @property
    def flow(self) -> Optional[float]:
        return average(self.CTF, self.RMD)

    @property
    def metacog_raw(self) -> Optional[float]:
        return average(self.RDX, self.IFD)

    @property
    def regulation(self) -> Optional[float]:
        return average(self.RDX, None if self.IFD is None else 1 - self.IFD)

    @property
    def authenticity(self) -> Optional[float]:
        if self.KPF is not None and self.TPS is not None:
            return (1 - self.KPF + self.TPS) / 2
        if self.KPF is not None:
            return 1 - self.KPF
        return self.TPS

    @property
    def machine_score(self) -> Optional[float]:
        if self.KPF is not None and self.TPS is not None:
            return (self.KPF + 1 - self.TPS) / 2
        if self.KPF is not None:
            return self.KPF
        if self.TPS is not None:
            return 1 - self.TPS
        return None


# ============================================================
# OBSERVED PATTERNS
# ============================================================

OBSERVED_THRESHOLD = 0.62
OBSERVED_MIN = 2
OBSERVED_MAX = 3


def profile_scores(core: CoreAxes) -> dict[str, Optional[float]]:
    """Raw scores for the eight observed profiles; None when not computable."""
    a, f, m = core.analyticity, core.flow, core.metacog_raw

    ar_base = weighted_average([(core.AAS, 0.65), (core.EDS, 0.35)])
    if ar_base is None and core.CTF is None:
        ar = None
    else:
        ar = (ar_base or 0.0) - (0.0 if core.CTF is None else 0.20 * core.CTF)

    auth = core.authenticity
    machine = core.machine_score

    scores = {
        "RE": weighted_average([(core.RDX, 0.45), (core.CTF, 0.30), (core.RMD, 0.25)]),
        "IE": None if f is None or a is None else 0.60 * f + 0.40 * (1 - a),
        "EW": weighted_average([(core.EDS, 0.55), (core.AAS, 0.45)]),
        "AR": ar,
        "SI": None if a is None or f is None or m is None else min(a, f, m),
        "RR": weighted_average([
            (core.RDX, 0.60),
            (None if core.IFD is None else 1 - core.IFD, 0.40),
        ]),
        "HE": None if auth is None else (
            0.55 * auth + 0.25 * (core.CTF or 0.0) + 0.20 * (core.RMD or 0.0)
        ),
        "MD": machine,
    }
    return {k: (None if v is None else clamp01(v)) for k, v in scores.items()}


def _pass_rule(code: str, core: CoreAxes, score: Optional[float], threshold: float):
    if score is None:
        if code in ("HE", "MD"):
            if core.KPF is None and core.TPS is None:
                return False, ["KPF-Sim and TPS-H are not available, score is not computable"]
            return False, ["KPF-Sim or TPS-H available, but required inputs for score are missing"]
        return False, ["Required indicators missing, score is not computable"]
    if score >= threshold:
        return True, []
    return False, [f"score < threshold ({threshold})"]


def observed_patterns(
    core: CoreAxes,
    threshold: float = OBSERVED_THRESHOLD,
    min_count: int = OBSERVED_MIN,
    max_count: int = OBSERVED_MAX,
) -> dict:
    """
    Score all eight profiles, then select 2-3 of them.

    Threshold first: every computable profile at or above the threshold,
    capped at max_count. If that leaves fewer than min_count, the top
    min_count computable profiles are taken instead.
    """
    scores = profile_scores(core)

    all_profiles = []
    for meta in OBSERVED_PROFILES:
        score = scores[meta.code]
        passed, reason = _pass_rule(meta.code, core, score, threshold)
        all_profiles.append({
            "code": meta.code,
            "label": meta.label,
            "description": meta.description,
            "score": None if score is None else round2(score),
            "pass_rule": passed,
            "reason": reason,
            "_score": score,
        })

    # Stable sort keeps table order among equal scores
    pool = sorted(
        (p for p in all_profiles if p["_score"] is not None),
        key=lambda p: -p["_score"],
    )
    picked = [p for p in pool if p["_score"] >= threshold][:max_count]
    if len(picked) < min_count:
        picked = pool[:min_count]

    def public(p: dict) -> dict:
        return {k: v for k, v in p.items() if k != "_score"}

    return {
        "layer": "Cognitive Pattern Profile Layer",
        "selection_rule": {
            "threshold": threshold,
            "min_count": min_count,
            "max_count": max_count,
        },
        "all_profiles": [public(p) for p in all_profiles],
        "profiles": [public(p) for p in picked],
    }


def pattern_summary(observed: dict) -> dict:
    """Primary/secondary pattern labels from an observed_patterns() result."""
    def ranked(items):
        return sorted(
            (p for p in items if p["score"] is not None),
            key=lambda p: -p["score"],
        )

    selected = ranked(observed["profiles"])
    chosen = selected if len(selected) >= 2 else ranked(observed["all_profiles"])

    primary = chosen[0] if len(chosen) > 0 else None
    secondary = chosen[1] if len(chosen) > 1 else None
    primary_meta = PROFILE_BY_CODE[primary["code"]] if primary else PROFILE_BY_CODE["RE"]
    secondary_meta = PROFILE_BY_CODE[secondary["code"]] if secondary else PROFILE_BY_CODE["EW"]

    return {
        "primary_label": primary_meta.label,
        "secondary_label": secondary_meta.label,
        "definition": {
            "primary": primary_meta.description,
            "secondary": secondary_meta.description,
        },
    }


# ============================================================
# FINAL TYPE
# ============================================================

@dataclass(frozen=True)
class FinalType:
    code: str
    confidence: float
    track: str

    def as_dict(self) -> dict:
        meta = FINAL_TYPES[self.code]
        return {
            "code": self.code,
            "label": meta.label,
            "chip_label": meta.name,
            "confidence": round2(clamp01(self.confidence)),
            "interpretation": type_interpretation(self.code),
            "track": self.track,
        }


def confidence_from_margin(margin: float) -> float:
    return clamp(0.65 + 0.7 * margin, 0.55, 0.92)


def select_track(machine_score: Optional[float], conservative_lock: bool) -> str:
    if machine_score is None or conservative_lock:
        return "Human"
    if machine_score >= 0.7:
        return "AI"
    if machine_score >= 0.4:
        return "Hybrid"
    return "Human"


def _choose_human_t(core: CoreAxes, t2_mode: str) -> tuple[str, float]:
    a, f, m = core.analyticity, core.flow, core.metacog_raw
    candidates: list[tuple[int, str, float]] = []

    if a is not None and f is not None and m is not None:
        if a >= 0.6 and f >= 0.6 and m >= 0.6:
            margin = min(a - 0.6, f - 0.6, m - 0.6)
            candidates.append((4, "T4", confidence_from_margin(margin)))

    axis = core.regulation if t2_mode == "Regulation" else m
    if axis is not None and axis >= 0.7:
        candidates.append((3, "T2", confidence_from_margin(axis - 0.7)))

    if a is not None and f is not None:
        if a >= 0.7 and f < 0.55:
            candidates.append((2, "T1", confidence_from_margin(min(a - 0.7, 0.55 - f))))
        if f >= 0.7 and a < 0.55:
            candidates.append((1, "T3", confidence_from_margin(min(f - 0.7, 0.55 - a))))

    if not candidates:
        return "T2", 0.6
    candidates.sort(key=lambda c: (-c[0], -c[2]))
    _, code, conf = candidates[0]
    return code, conf


def _choose_ax(core: CoreAxes) -> Optional[tuple[str, float]]:
    aas, rdx, rmd, eds, ifd = core.AAS, core.RDX, core.RMD, core.EDS, core.IFD
    flow, machine = core.flow, core.machine_score

    if aas is not None and rdx is not None and rmd is not None:
        if aas >= 0.8 and rdx <= 0.4 and rmd <= 0.45:
            return "Ax-1", confidence_from_margin(min(aas - 0.8, 0.4 - rdx, 0.45 - rmd))
    if eds is not None and aas is not None and ifd is not None:
        if eds >= 0.8 and aas >= 0.65 and ifd <= 0.4:
            return "Ax-2", confidence_from_margin(min(eds - 0.8, aas - 0.65, 0.4 - ifd))
    if flow is not None and machine is not None:
        if flow >= 0.65 and machine >= 0.7:
            return "Ax-3", confidence_from_margin(min(flow - 0.65, machine - 0.7))
    if aas is not None and rdx is not None and ifd is not None:
        if aas >= 0.75 and rdx <= 0.45 and ifd <= 0.35:
            return "Ax-4", confidence_from_margin(min(aas - 0.75, 0.45 - rdx, 0.35 - ifd))
    return None


def _choose_hx(core: CoreAxes) -> Optional[tuple[str, float]]:
    kpf = core.KPF
    if kpf is None:
        return None
    aas, ctf, rmd, rdx, eds = core.AAS, core.CTF, core.RMD, core.RDX, core.EDS
    kpf_mid = 0.25 <= kpf <= 0.55

    if rdx is not None and rdx >= 0.6 and kpf_mid:
        return "Hx-1", confidence_from_margin(min(rdx - 0.6, kpf - 0.25, 0.55 - kpf))
    if aas is not None and ctf is not None and aas >= 0.6 and ctf >= 0.6 and kpf_mid:
        return "Hx-2", confidence_from_margin(
            min(aas - 0.6, ctf - 0.6, kpf - 0.25, 0.55 - kpf)
        )
    if eds is not None and eds >= 0.75 and kpf_mid:
        return "Hx-3", confidence_from_margin(min(eds - 0.75, kpf - 0.25, 0.55 - kpf))
    if aas is not None and rmd is not None and aas >= 0.7 and rmd <= 0.45 and kpf >= 0.45:
        return "Hx-4", confidence_from_margin(min(aas - 0.7, 0.45 - rmd, kpf - 0.45))
    return None


def _choose_t5_t6(core: CoreAxes) -> Optional[tuple[str, float]]:
    auth, machine = core.authenticity, core.machine_score
    if auth is None or machine is None:
        return None
    if machine >= 0.7 or auth <= 0.4:
        return "T6", confidence_from_margin(max(machine - 0.7, 0.4 - auth))
    if auth >= 0.75:
        return "T5", confidence_from_margin(auth - 0.75)
    return None


def determine_final_type(
    core: CoreAxes,
    t2_mode: str = "Regulation",
    conservative_lock: bool = False,
) -> FinalType:
    """Pick the track, then the first satisfied archetype within it."""
    track = select_track(core.machine_score, conservative_lock)

    if track == "Human":
        chosen = _choose_t5_t6(core)
    elif track == "Hybrid":
        chosen = _choose_hx(core)
    else:
        chosen = _choose_ax(core)

    if chosen is None:
        chosen = _choose_human_t(core, t2_mode)

    code, conf = chosen
    return FinalType(code=code, confidence=conf, track=track)


# ============================================================
# SECTION BUILDER
# ============================================================

def derive_cff(
    payload: Any,
    t2_mode: Optional[str] = None,
    conservative_lock: Optional[bool] = None,
) -> dict:
    """Build the {"cff": {...}} report section for one analysis input."""
    ai = AnalysisInput.coerce(payload)
    t2_mode = t2_mode or settings.CFF_T2_MODE
    if conservative_lock is None:
        conservative_lock = settings.CFF_CONSERVATIVE_LOCK

    indicators = build_indicators(ai.raw, ai.indicators)
    core = CoreAxes.from_indicators(indicators)
    observed = observed_patterns(core)
    final = determine_final_type(core, t2_mode=t2_mode, conservative_lock=conservative_lock)

    logger.debug(
        "CFF derived",
        extra={"final_type": final.code, "section": "cff"},
    )

    return {
        "cff": {
            "indicators": {code: ind.as_dict() for code, ind in indicators.items()},
            **radar_output(indicators),
            "axes": {
                "analyticity": _r2(core.analyticity),
                "flow": _r2(core.flow),
                "metacognition": _r2(core.metacog_raw),
                "regulation": _r2(core.regulation),
                "authenticity": _r2(core.authenticity),
                "machine_score": _r2(core.machine_score),
            },
            "observed_patterns": observed,
            "pattern": pattern_summary(observed),
            "final_type": final.as_dict(),
        }
    }


def _r2(x: Optional[float]) -> Optional[float]:
    return None if x is None else round2(x)
