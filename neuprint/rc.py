"""
RC — Reasoning Control Scorer

Places a text in a 3-D control space and reads the report off it:

  A (agency)      intent, revision, counter-evaluation, self-regulation
  D (depth)       reasons, evidence and transition density per claim/unit
  R (reflection)  revision frequency and depth, counter rate, self-regulation

The (A, D, R) vector is matched to the nearest of nine fixed centroids;
distance to that centroid gives the reliability band. Alongside it the
scorer selects up to four evidence lines from the S1-S18 template
library, computes the Human/Hybrid/AI control distribution from a
logistic model, and reports four structural control signals measured
from per-unit data.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from neuprint.archetypes import CONTROL_PATTERNS, SIGNAL_LIBRARY, ControlPattern
from neuprint.cff import derive_cff
from neuprint.features import AnalysisInput, RawFeatures
from neuprint.normalize import (
    clamp01,
    cv,
    mean,
    round3,
    safe_div,
    sat,
    sigmoid,
    to_float,
    to_optional_float,
)

logger = logging.getLogger(__name__)


# ============================================================
# CONTROL VECTOR
# ============================================================

@dataclass(frozen=True)
class ControlVector:
    A: float
    D: float
    R: float

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.A, self.D, self.R)

    def as_dict(self) -> dict[str, float]:
        return {"A": round3(self.A), "D": round3(self.D), "R": round3(self.R)}


def compute_control_vector(raw: RawFeatures) -> ControlVector:
    units = raw.unit_count
    per_claim = max(1.0, raw.claims)

    trans_density = safe_div(raw.transitions, units)
    trans_quality = clamp01(safe_div(raw.transition_ok, raw.transitions))
    rev_rate = safe_div(raw.revisions, units)
    rev_depth = safe_div(raw.revision_depth_sum, raw.revisions)
    counter_rate = safe_div(raw.counterpoints + raw.refutations, per_claim)
    intent_rate = safe_div(raw.intent_markers, units)
    drift_rate = safe_div(raw.drift_segments, units)
    self_reg_rate = safe_div(raw.self_regulation_signals, units)
    reason_rate = safe_div(raw.reasons, per_claim)
    evidence_rate = safe_div(raw.evidence, per_claim)

    a_core = (
        0.30 * sat(intent_rate, 0.25)
        + 0.28 * sat(rev_rate, 0.30)
        + 0.24 * sat(counter_rate, 0.35)
        + 0.12 * trans_quality
        + 0.06 * sat(self_reg_rate, 0.20)
    )
    # Dense but low-quality transitions read as automated continuation
    a_penalty = (
        0.24 * sat(drift_rate, 0.25)
        + 0.16 * sat(trans_density * (1 - trans_quality), 0.25)
    )

    d_core = (
        0.45 * sat(reason_rate, 0.9)
        + 0.35 * sat(evidence_rate, 0.7)
        + 0.20 * sat(trans_density, 0.7)
    )

    r_core = (
        0.32 * sat(rev_rate, 0.28)
        + 0.24 * sat(rev_depth, 0.9)
        + 0.22 * sat(counter_rate, 0.30)
        + 0.16 * sat(self_reg_rate, 0.25)
        + 0.06 * trans_quality
    )
    r_penalty = 0.12 * sat(drift_rate, 0.30)

    return ControlVector(
        A=clamp01(a_core - a_penalty),
        D=clamp01(d_core),
        R=clamp01(r_core - r_penalty),
    )


# ============================================================
# CENTROID CLASSIFICATION
# ============================================================

@dataclass
class ControlMatch:
    pattern: ControlPattern
    distance: float
    band: str


def euclidean(a: Sequence[float], b: Sequence[float]) -> float:
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


def reliability_band(distance: float) -> str:
    if distance < 0.12:
        return "HIGH"
    if distance < 0.22:
        return "MEDIUM"
    return "LOW"


def nearest_centroid(
    vector: ControlVector,
    patterns: Sequence[ControlPattern] = CONTROL_PATTERNS,
) -> ControlMatch:
    """Closest centroid; on exact ties the first registered pattern wins."""
    v = tuple(
        clamp01(x) if to_optional_float(x) is not None else 0.5
        for x in vector.as_tuple()
    )

    best = patterns[0]
    best_dist = math.inf
    for p in patterns:
        d = euclidean(v, p.vector)
        if d < best_dist:
            best, best_dist = p, d

    return ControlMatch(pattern=best, distance=best_dist, band=reliability_band(best_dist))


# ============================================================
# OBSERVED STRUCTURAL SIGNALS
# ============================================================

CORE_GROUPS = ("REVISION", "TRANSITION", "COUNTER", "NONAUTO")
FILL_GROUPS = ("EVIDENCE", "SPECIFICITY")
DISPLAY_LINES = 4


def select_signal_lines(active_ids: Iterable[str], limit: int = DISPLAY_LINES) -> list[str]:
    """
    Pick up to `limit` evidence lines from the active template IDs.

    One best line per core group, then the fill groups, then whatever
    actives remain by priority. Unknown IDs are ignored and a shortfall
    returns fewer lines; nothing is padded.
    """
    active = set(active_ids)
    candidates = [t for t in SIGNAL_LIBRARY if t.id in active]

    def best_in(group: str):
        best = None
        for t in candidates:
            if t.group == group and (best is None or t.priority < best.priority):
                best = t
        return best

    selected = []
    for group in CORE_GROUPS + FILL_GROUPS:
        if len(selected) >= limit:
            break
        t = best_in(group)
        if t is not None and t not in selected:
            selected.append(t)

    if len(selected) < limit:
        remaining = sorted(
            (t for t in candidates if t not in selected),
            key=lambda t: t.priority,
        )
        selected.extend(remaining[: limit - len(selected)])

    return [t.text for t in selected[:limit]]


def signal_lines_export(lines: Sequence[str], slots: int = DISPLAY_LINES) -> dict[str, str]:
    """Fixed "1".."4" keys; unused slots are empty strings."""
    return {str(i + 1): (lines[i] if i < len(lines) else "") for i in range(slots)}


# ============================================================
# REASONING CONTROL DISTRIBUTION
# ============================================================

CFV_KEYS = ("aas", "ctf", "rmd", "rdx", "eds", "hi", "tps_hist", "ifd")

HYBRID_GUARD = {
    "rdx_low": 0.40,
    "hi_mid": 0.55,
    "aas_human_like": 0.60,
    "eds_ai_like": 0.60,
}

DETERMINATION_SENTENCES = {
    "Human": "The combined signal profile supports classification as human-controlled reasoning.",
    "Hybrid": "The combined signal profile indicates mixed control dynamics across structural "
              "decision boundaries, consistent with hybrid reasoning control.",
    "AI": "The combined signal profile supports classification as AI-assisted or AI-dominant "
          "reasoning control across structural decision boundaries.",
}


@dataclass(frozen=True)
class LogisticModel:
    beta0: float
    betas: dict[str, float] = field(default_factory=dict)
    z_clip: float = 20.0

    @classmethod
    def from_mapping(cls, data: Optional[dict]) -> "LogisticModel":
        """Caller-supplied model; missing parts fall back to the default."""
        if not data:
            return DEFAULT_MODEL
        betas_src = data.get("betas") if isinstance(data.get("betas"), dict) else {}
        return cls(
            beta0=to_float(data.get("beta0"), DEFAULT_MODEL.beta0),
            betas={k: to_float(betas_src.get(k)) for k in CFV_KEYS if k in betas_src},
            z_clip=to_float(data.get("z_clip"), 20.0),
        )


DEFAULT_MODEL = LogisticModel(
    beta0=-2.5,
    betas={
        "aas": 0.4, "ctf": 0.8, "rmd": 0.6, "rdx": 1.4,
        "eds": 0.2, "hi": 1.2, "tps_hist": 1.6, "ifd": 1.0,
    },
)


def p_human(cfv: dict[str, float], model: LogisticModel = DEFAULT_MODEL) -> float:
    z = model.beta0
    for key in CFV_KEYS:
        z += to_float(model.betas.get(key)) * clamp01(cfv.get(key))
    return clamp01(sigmoid(z, z_clip=model.z_clip))


def determine_label(cfv: dict[str, float], p_h: float) -> str:
    """Human >= 0.75, AI < 0.45; Hybrid only when the guard conjunction holds."""
    ph = clamp01(p_h)
    pa = clamp01(1 - ph)

    if ph >= 0.75:
        return "Human"
    if ph < 0.45:
        return "AI"

    hybrid_ok = (
        ph >= 0.35
        and pa >= 0.35
        and clamp01(cfv.get("rdx")) < HYBRID_GUARD["rdx_low"]
        and clamp01(cfv.get("hi")) >= HYBRID_GUARD["hi_mid"]
        and clamp01(cfv.get("aas")) >= HYBRID_GUARD["aas_human_like"]
        and clamp01(cfv.get("eds")) >= HYBRID_GUARD["eds_ai_like"]
    )
    if hybrid_ok:
        return "Hybrid"
    return "Human" if ph >= pa else "AI"


def split_percentages(shares: Sequence[float]) -> list[int]:
    """
    Integer percentages summing to exactly 100 (largest remainder).
    Ties on the remainder go to the earlier share.
    """
    shares = [clamp01(s) for s in shares]
    total = sum(shares)
    if total <= 0:
        shares = [1.0] + [0.0] * (len(shares) - 1)
        total = 1.0

    exact = [s / total * 100 for s in shares]
    floors = [int(math.floor(x)) for x in exact]
    short = 100 - sum(floors)
    order = sorted(range(len(exact)), key=lambda i: (-(exact[i] - floors[i]), i))
    for i in order[:short]:
        floors[i] += 1
    return floors


@dataclass
class ControlDistribution:
    human: int
    hybrid: int
    ai: int
    p_human: float
    determination: str

    def as_dict(self) -> dict:
        return {
            "Human": f"{self.human}%",
            "Hybrid": f"{self.hybrid}%",
            "AI": f"{self.ai}%",
            "p_human": round3(self.p_human),
            "final_determination": self.determination,
            "determination_sentence": DETERMINATION_SENTENCES[self.determination],
        }


def reasoning_control_distribution(
    cfv: dict[str, float],
    model: LogisticModel = DEFAULT_MODEL,
) -> ControlDistribution:
    ph = p_human(cfv, model)
    pa = clamp01(1 - ph)
    final = determine_label(cfv, ph)

    overlap = min(ph, pa)
    if final == "Hybrid":
        hybrid = clamp01(2 * overlap)
        human = clamp01(ph - hybrid / 2)
        ai = clamp01(pa - hybrid / 2)
    else:
        hybrid = clamp01(overlap)
        human = clamp01(ph - hybrid)
        ai = clamp01(pa - hybrid)

    h, hy, a = split_percentages([human, hybrid, ai])
    return ControlDistribution(human=h, hybrid=hy, ai=a, p_human=ph, determination=final)


# ============================================================
# STRUCTURAL CONTROL SIGNALS
# ============================================================

VARIANCE_KEYS = (
    "claims", "reasons", "evidence", "sub_claims",
    "warrants", "counterpoints", "refutations", "transitions",
)
SV_MAX = 0.35
CV_REF = 0.6
DEPTH_MAX = 3.0


def segment_count(units: int) -> int:
    """K = round(sqrt(units)) held to 3..8; always 3 below six units."""
    u = max(1, int(units))
    if u < 6:
        return 3
    return min(8, max(3, int(math.floor(math.sqrt(u) + 0.5))))


def segment_ranges(units: int, k: int) -> list[tuple[int, int]]:
    u = max(1, int(units))
    return [((i * u) // k, ((i + 1) * u) // k) for i in range(k)]


def structural_variance(raw: RawFeatures) -> float:
    """Mean distance of per-segment density vectors from their centre."""
    series = {k: raw.per_unit_series(k) for k in VARIANCE_KEYS}
    if not any(series.values()):
        return 0.0

    units = raw.unit_count
    segments = []
    for start, end in segment_ranges(units, segment_count(units)):
        width = max(1, end - start)
        segments.append([sum(series[k][start:end]) / width for k in VARIANCE_KEYS])

    centre = [sum(col) / len(segments) for col in zip(*segments)]
    spread = sum(euclidean(seg, centre) for seg in segments) / len(segments)
    return clamp01(spread / SV_MAX)


def _event_gaps(series: Sequence[float]) -> list[int]:
    idx = [i for i, v in enumerate(series) if v > 0]
    return [b - a for a, b in zip(idx, idx[1:])]


def human_rhythm_index(raw: RawFeatures) -> float:
    """Irregularity of unit lengths and event spacing, over CV_REF."""
    terms = []
    if len(raw.unit_lengths) >= 2:
        terms.append((cv([math.floor(x) for x in raw.unit_lengths]), 0.6))

    for key in ("transitions", "revisions"):
        gaps = _event_gaps(raw.per_unit_series(key))
        if len(gaps) >= 2:
            terms.append((cv(gaps), 0.2))

    if not terms:
        return 0.0
    combined = sum(v * w for v, w in terms) / sum(w for _, w in terms)
    return clamp01(combined / CV_REF)


def _mean_run_length(series: Sequence[float]) -> float:
    runs, cur = [], 0
    for v in series:
        if v > 0:
            cur += 1
        elif cur:
            runs.append(cur)
            cur = 0
    if cur:
        runs.append(cur)
    return mean(runs) if runs else 1.0


def transition_flow(raw: RawFeatures) -> float:
    per_t = raw.per_unit_series("transitions")
    per_ok = raw.per_unit_series("transition_ok")
    total = sum(per_t) if per_t else raw.transitions
    valid = sum(per_ok) if per_ok else raw.transition_ok

    ratio = valid / max(1.0, total)
    chain = _mean_run_length(per_t) if per_t else 1.0
    return clamp01(ratio * math.log(1 + max(0.0, chain)))


def revision_depth(raw: RawFeatures) -> float:
    per_depth = raw.per_unit_series("revision_depth")
    depth_sum = sum(per_depth) if per_depth else raw.revision_depth_sum
    return clamp01(depth_sum / DEPTH_MAX)


def structural_control_signals(raw: RawFeatures) -> dict[str, float]:
    return {
        "structural_variance": round3(structural_variance(raw)),
        "human_rhythm_index": round3(human_rhythm_index(raw)),
        "transition_flow": round3(transition_flow(raw)),
        "revision_depth": round3(revision_depth(raw)),
    }


# ============================================================
# SECTION BUILDER
# ============================================================

def _indicator_value(cff: dict, code: str, fallback: float = 0.5) -> float:
    ind = (cff.get("indicators") or {}).get(code) or {}
    score = to_optional_float(ind.get("score"))
    if ind.get("status") != "Active" or score is None:
        return fallback
    if code == "TPS-H" and score > 1.01:
        score = score / 100
    return clamp01(score)


def build_cfv(cff: dict, raw: RawFeatures) -> dict[str, float]:
    """Model features from the CFF section plus the rhythm index."""
    return {
        "aas": _indicator_value(cff, "AAS"),
        "ctf": _indicator_value(cff, "CTF"),
        "rmd": _indicator_value(cff, "RMD"),
        "rdx": _indicator_value(cff, "RDX"),
        "eds": _indicator_value(cff, "EDS"),
        "hi": human_rhythm_index(raw),
        "tps_hist": _indicator_value(cff, "TPS-H"),
        "ifd": _indicator_value(cff, "IFD"),
    }


def derive_rc(payload: Any, cff: Optional[dict] = None) -> dict:
    """
    Build the {"rc": {...}} section. `cff` is the CFF section the
    orchestrator already computed; it is derived here when absent.
    """
    ai = AnalysisInput.coerce(payload)
    raw = ai.raw

    if cff is None:
        cff = derive_cff(ai)["cff"]

    vector = compute_control_vector(raw)
    match = nearest_centroid(vector)

    lines = select_signal_lines(ai.active_signal_ids)
    model = LogisticModel.from_mapping(ai.rc_model)
    distribution = reasoning_control_distribution(build_cfv(cff, raw), model)

    logger.debug(
        "RC derived",
        extra={
            "control_pattern": match.pattern.key,
            "determination": distribution.determination,
            "section": "rc",
        },
    )

    return {
        "rc": {
            "summary": match.pattern.description,
            "control_pattern": match.pattern.label,
            "control_pattern_code": match.pattern.key,
            "reliability_band": match.band,
            "band_rationale": match.pattern.rationale,
            "pattern_interpretation": match.pattern.interpretation,
            "control_vector": vector.as_dict(),
            "centroid_distance": round3(match.distance),
            "observed_structural_signals": signal_lines_export(lines),
            "reasoning_control_distribution": distribution.as_dict(),
            "structural_control_signals": structural_control_signals(raw),
        }
    }
