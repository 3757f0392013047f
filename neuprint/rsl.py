"""
RSL — Reasoning Structure Level Scorer

Turns raw structural counts into the RSL section of the report:

  1. Rubric: four 0-5 dimensions (coherence, structure, evaluation,
     integration) from fixed weighted formulas over RawFeatures
  2. Level: gate ladder L1 -> L6 over the weakest rubric dimension,
     with evidence sufficiency required for L4 and above
  3. FRI: friction/reliability index from the rubric, plus cohort
     positioning against an optional list of peer FRI scores
  4. SRI: stability index from rubric dispersion, transition jumps
     and meta imbalance

Every function is pure. derive_rsl() is the only entry point the
pipeline calls; the rest are exposed for reuse and testing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from neuprint.archetypes import LEVEL_METADATA, LevelMeta
from neuprint.config import settings
from neuprint.features import AnalysisInput, RawFeatures
from neuprint.normalize import (
    clamp01,
    clamp0to5,
    entropy01,
    mean,
    peak01,
    round2,
    round3,
    round_half_up,
    std,
    to_float,
)

logger = logging.getLogger(__name__)


# ============================================================
# RUBRIC
# ============================================================

DIMENSIONS = ("coherence", "structure", "evaluation", "integration")


@dataclass(frozen=True)
class Rubric4:
    """Four reasoning dimensions on a 0-5 scale."""
    coherence: float = 0.0
    structure: float = 0.0
    evaluation: float = 0.0
    integration: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {d: getattr(self, d) for d in DIMENSIONS}

    def as_vector(self) -> list[float]:
        """Each dimension divided by 5 and clamped to [0, 1]."""
        return [clamp01(to_float(getattr(self, d)) / 5.0) for d in DIMENSIONS]

    @classmethod
    def from_mapping(cls, values: dict) -> "Rubric4":
        return cls(**{d: to_float(values.get(d)) for d in DIMENSIONS})


@dataclass(frozen=True)
class _Ratios:
    """Shared 0..1 ratios used by the rubric and the SRI penalties."""
    trans_rate: float
    trans_quality: float
    rev_rate: float
    rev_depth: float
    drift_rate: float
    adjacency: float
    evidence: float
    warrant: float
    counter_ref: float
    hedge_penalty: float
    balance: float
    intent: float
    self_reg: float


def _int(x: float) -> int:
    return int(x // 1)


def _ratios(raw: RawFeatures) -> _Ratios:
    units = raw.unit_count
    claims = _int(raw.claims)
    reasons = _int(raw.reasons)
    evidence = _int(raw.evidence)
    warrants = _int(raw.warrants)
    transitions = _int(raw.transitions)
    revisions = _int(raw.revisions)

    atoms = max(1, claims + reasons + warrants + evidence)
    per_claim = max(1, claims)

    return _Ratios(
        trans_rate=clamp01(transitions / max(1, units - 1)),
        trans_quality=clamp01(_int(raw.transition_ok) / max(1, transitions)),
        rev_rate=clamp01(revisions / units),
        rev_depth=clamp01((raw.revision_depth_sum / max(1, revisions)) / 1.5),
        drift_rate=clamp01((_int(raw.drift_segments) + _int(raw.loops)) / units),
        adjacency=clamp01(_int(raw.adjacency_links) / atoms),
        evidence=clamp01(evidence / per_claim),
        warrant=clamp01(warrants / per_claim),
        counter_ref=clamp01(
            ((_int(raw.counterpoints) + _int(raw.refutations)) / per_claim) / 0.6
        ),
        hedge_penalty=clamp01((_int(raw.hedges) / per_claim) / 0.7),
        balance=entropy01([claims, reasons, warrants, evidence]),
        intent=clamp01(_int(raw.intent_markers) / 2),
        self_reg=clamp01(_int(raw.self_regulation_signals) / 2),
    )


def compute_rubric(raw: RawFeatures) -> Rubric4:
    """Derive the 0-5 rubric from raw counts (two-decimal precision)."""
    r = _ratios(raw)

    coherence = clamp01(
        0.45 * r.trans_quality
        + 0.25 * r.adjacency
        + 0.30 * (1 - r.drift_rate)
    )
    # Revision rate scores best around 0.15 per unit
    structure = clamp01(
        0.40 * r.trans_rate
        + 0.30 * r.intent
        + 0.30 * peak01(r.rev_rate, 0.15, 0.15)
    )
    evaluation = clamp01(
        0.35 * r.evidence
        + 0.25 * r.warrant
        + 0.25 * r.counter_ref
        + 0.15 * (1 - r.hedge_penalty)
    )
    integration = clamp01(
        0.50 * r.balance
        + 0.20 * r.self_reg
        + 0.20 * r.trans_quality
        + 0.10 * r.rev_depth
    )

    return Rubric4(
        coherence=round2(5 * coherence),
        structure=round2(5 * structure),
        evaluation=round2(5 * evaluation),
        integration=round2(5 * integration),
    )


# ============================================================
# LEVEL CLASSIFICATION
# ============================================================

@dataclass(frozen=True)
class LevelFlags:
    strict_mode: bool = False
    evidence_required_for_l4plus: bool = True
    allow_l6: bool = True


@dataclass(frozen=True)
class LevelPolicy:
    gate_l2_min: int = 1
    gate_l3_min: int = 2
    gate_l4_min: int = 3
    gate_l5_min: int = 4
    gate_l6_min: int = 5
    min_evidence_count: int = 2
    min_evidence_link_rate: float = 0.3
    strict_gate_bonus: int = 0
    l6_integration_min: int = 5


@dataclass
class LevelResult:
    level: str
    meta: LevelMeta
    rubric_min: int
    rubric_mean: float
    evidence_ok: bool
    gates: dict[str, bool] = field(default_factory=dict)

    @property
    def level_number(self) -> int:
        return int(self.level[1:])


def _int0to5(x) -> int:
    return int(clamp0to5(round_half_up(to_float(x))))


def default_level_flags() -> LevelFlags:
    return LevelFlags(
        strict_mode=settings.RSL_STRICT_MODE,
        evidence_required_for_l4plus=settings.RSL_EVIDENCE_REQUIRED,
        allow_l6=settings.RSL_ALLOW_L6,
    )


def classify_level(
    rubric: Rubric4,
    evidence_count: float = 0,
    evidence_link_rate: Optional[float] = None,
    has_counterpoint: bool = False,
    has_refutation: bool = False,
    flags: Optional[LevelFlags] = None,
    policy: Optional[LevelPolicy] = None,
) -> LevelResult:
    """
    Climb the L1 -> L6 ladder. Each gate compares the weakest
    integer-rounded rubric dimension against a threshold; L4 and above
    also need enough evidence, L5 in strict mode needs a counter signal,
    and L6 needs full integration.
    """
    flags = flags or LevelFlags()
    policy = policy or LevelPolicy()

    scores = [_int0to5(v) for v in rubric.as_dict().values()]
    integration = scores[3]
    rubric_min = min(scores)
    rubric_mean = sum(scores) / 4

    bonus = policy.strict_gate_bonus if flags.strict_mode else 0

    def gate(base: int) -> int:
        return max(0, min(5, _int0to5(base) + bonus))

    if flags.evidence_required_for_l4plus:
        evidence_ok = (
            to_float(evidence_count) >= policy.min_evidence_count
            and clamp01(evidence_link_rate) >= policy.min_evidence_link_rate
        )
    else:
        evidence_ok = True

    pass_l2 = rubric_min >= gate(policy.gate_l2_min)
    pass_l3 = rubric_min >= gate(policy.gate_l3_min)
    pass_l4 = rubric_min >= gate(policy.gate_l4_min) and evidence_ok
    pass_l5 = rubric_min >= gate(policy.gate_l5_min) and evidence_ok
    if flags.strict_mode:
        pass_l5 = pass_l5 and (has_counterpoint or has_refutation)
    pass_l6 = (
        flags.allow_l6
        and pass_l5
        and rubric_min >= gate(policy.gate_l6_min)
        and integration >= policy.l6_integration_min
    )

    gates = {"L2": pass_l2, "L3": pass_l3, "L4": pass_l4, "L5": pass_l5, "L6": pass_l6}
    level = "L1"
    for code, passed in gates.items():
        if passed:
            level = code

    return LevelResult(
        level=level,
        meta=LEVEL_METADATA[level],
        rubric_min=rubric_min,
        rubric_mean=rubric_mean,
        evidence_ok=evidence_ok,
        gates=gates,
    )


# ============================================================
# FRI & COHORT
# ============================================================

_FRI_BANDS = (
    (0.79, "Your reasoning structure is still taking shape. Ideas often appear "
           "separately, making connections harder to follow."),
    (1.59, "Early signs of structure are beginning to appear. Some steps are present, "
           "but connections and checks are not yet consistent."),
    (2.39, "A basic reasoning structure is forming. Key steps align, though stability "
           "can drop as complexity increases."),
    (3.19, "Your reasoning structure works well overall. Most ideas connect, with "
           "occasional gaps in validation or monitoring."),
    (3.99, "Your reasoning structure is stable in most situations. Connections and "
           "evaluations usually remain consistent."),
)
_FRI_TOP = ("You can reason structurally even in complex situations. Your thinking stays "
            "stable and self-regulated as ideas scale.")

_COHORT_BANDS = (
    (50, "Core reasoning steps are emerging, with structure still developing compared "
         "to most peers."),
    (30, "Developing structure, with several reasoning patterns beginning to align "
         "relative to comparable peers."),
    (20, "Generally well-structured reasoning compared to most peers, with room for "
         "further stabilization."),
    (10, "Consistently structured reasoning relative to comparable peers."),
    (5, "Highly consistent reasoning structure compared to most peers, even as "
        "complexity increases."),
)
_COHORT_TOP = "Exceptionally stable reasoning structure within the current comparison group."


def compute_fri(r3: float, r4: float, r5: float, r6: float) -> float:
    """
    FRI = CRS x RM, clamped to 0-5.

    CRS weighs coherence/structure/evaluation 0.3/0.4/0.3; RM scales
    it from 0.85 to 1.15 with integration.
    """
    crs = 0.3 * clamp0to5(r3) + 0.4 * clamp0to5(r4) + 0.3 * clamp0to5(r5)
    rm = 0.85 + (clamp0to5(r6) / 5) * 0.3
    return round2(clamp0to5(crs * rm))


def fri_note(fri: float) -> str:
    x = to_float(fri)
    for ceiling, note in _FRI_BANDS:
        if x <= ceiling:
            return note
    return _FRI_TOP


def percentile01(value: float, peers: Sequence[float]) -> float:
    """Share of peers strictly below value (3 decimals); 0.5 with no peers."""
    if not peers:
        return 0.5
    v = to_float(value)
    lower = sum(1 for p in peers if to_float(p) < v)
    return round3(lower / len(peers))


def top_percent(percentile: float) -> int:
    return int(round_half_up((1 - to_float(percentile, 0.5)) * 100))


def top_percent_label(percentile: float) -> str:
    top = top_percent(percentile)
    if top <= 1:
        return "Top 1%"
    return f"Top {top}%"


def cohort_interpretation(top_percent_value: float) -> str:
    t = to_float(top_percent_value, 50)
    for floor, text in _COHORT_BANDS:
        if t >= floor:
            return text
    return _COHORT_TOP


# ============================================================
# SRI - STRUCTURAL RELIABILITY
# ============================================================

SRI_WEIGHTS = {"variance": 0.4, "transition": 0.3, "meta": 0.3}

_SRI_INSUFFICIENT = (
    "Structural reliability is not fully available due to insufficient structural "
    "data. Results are shown with coaching emphasis."
)
_SRI_BANDS = (
    (0.8, "HIGH", "Structural coherence is consistently maintained across reasoning "
                  "segments. The structural reference is considered stable."),
    (0.65, "MODERATE", "Structural coherence is generally maintained, with localized "
                       "variability across segments. Stability is acceptable with "
                       "moderate fluctuation."),
)
_SRI_LOW = ("Structural variability is evident across reasoning segments. Stability is "
            "limited and interpretive caution is advised.")


@dataclass
class SRIResult:
    sri: float
    band: str
    notes: str
    diagnostics: dict[str, Any] = field(default_factory=dict)


def transition_jump_score(raw: RawFeatures) -> float:
    """0..1, higher is worse: poor transitions plus per-unit volatility."""
    r = _ratios(raw)

    per_unit = raw.per_unit_series("transitions")
    if len(per_unit) > 1:
        volatility = clamp01(std(per_unit) / max(1.0, mean(per_unit) + 1))
    else:
        volatility = 0.5

    lengths = raw.unit_lengths
    if len(lengths) > 1:
        length_var = clamp01(std(lengths) / max(1.0, mean(lengths)))
    else:
        length_var = 0.5

    small_units_penalty = 0.15 if raw.unit_count < 3 else 0.0

    return clamp01(
        0.50 * (1 - r.trans_quality)
        + 0.25 * volatility
        + 0.25 * length_var
        + small_units_penalty
    )


def meta_imbalance_score(raw: RawFeatures) -> float:
    """0..1, higher is worse: unbalanced argument atoms, drift, hedging."""
    r = _ratios(raw)
    return clamp01(
        0.60 * (1 - r.balance)
        + 0.20 * clamp01(r.drift_rate / 0.25)
        + 0.20 * r.hedge_penalty
    )


def compute_sri(
    vector: Sequence[float],
    transition_jump: Optional[float] = None,
    meta_imbalance: Optional[float] = None,
) -> SRIResult:
    weights = dict(SRI_WEIGHTS)
    if len(vector) < 2:
        return SRIResult(
            sri=0.5,
            band="MODERATE",
            notes=_SRI_INSUFFICIENT,
            diagnostics={
                "variance_score": 0.5,
                "transition_score": 0.5,
                "meta_score": 0.5,
                "instability": 0.5,
                "weights": weights,
            },
        )

    v01 = [clamp01(x) for x in vector]
    variance_score = clamp01(std(v01) / 0.5)
    transition_score = clamp01(0.5 if transition_jump is None else transition_jump)
    meta_score = clamp01(0.5 if meta_imbalance is None else meta_imbalance)

    instability = clamp01(
        weights["variance"] * variance_score
        + weights["transition"] * transition_score
        + weights["meta"] * meta_score
    )
    sri = clamp01(1 - instability)

    band, notes = "LOW", _SRI_LOW
    for floor, name, text in _SRI_BANDS:
        if sri >= floor:
            band, notes = name, text
            break

    return SRIResult(
        sri=sri,
        band=band,
        notes=notes,
        diagnostics={
            "variance_score": variance_score,
            "transition_score": transition_score,
            "meta_score": meta_score,
            "instability": instability,
            "weights": weights,
        },
    )


# ============================================================
# SECTION BUILDER
# ============================================================

def derive_rsl(
    payload: Any,
    flags: Optional[LevelFlags] = None,
    policy: Optional[LevelPolicy] = None,
) -> dict:
    """Build the {"rsl": {...}} report section for one analysis input."""
    ai = AnalysisInput.coerce(payload)
    raw = ai.raw

    computed = compute_rubric(raw)
    rubric = Rubric4.from_mapping(ai.rubric) if ai.rubric is not None else computed

    link_rate = ai.evidence_link_rate
    if link_rate is None:
        link_rate = clamp01(raw.evidence / max(1.0, raw.claims))

    level = classify_level(
        rubric,
        evidence_count=raw.evidence,
        evidence_link_rate=link_rate,
        has_counterpoint=raw.counterpoints > 0,
        has_refutation=raw.refutations > 0,
        flags=flags or default_level_flags(),
        policy=policy,
    )

    fri = compute_fri(rubric.coherence, rubric.structure, rubric.evaluation, rubric.integration)

    pct = percentile01(fri, ai.cohort_fri_list)
    label = top_percent_label(pct)
    interpretation = cohort_interpretation(top_percent(pct))

    vector = computed.as_vector()
    jump = transition_jump_score(raw)
    imbalance = meta_imbalance_score(raw)
    sri = compute_sri(vector, jump, imbalance)

    logger.debug(
        "RSL derived",
        extra={"rsl_level": level.level, "section": "rsl"},
    )

    return {
        "rsl": {
            "level": level.level,
            "level_meta": level.meta.as_dict(),
            "level_detail": {
                "rubric_min": level.rubric_min,
                "rubric_mean_0to5": level.rubric_mean,
                "evidence_ok": level.evidence_ok,
                "evidence_link_rate": round2(link_rate),
                "gates": level.gates,
            },
            "rubric": rubric.as_dict(),
            "rubric_vector": [round3(v) for v in rubric.as_vector()],
            "fri": {"score": fri, "interpretation": fri_note(fri)},
            "cohort": {
                "percentile_0to1": pct,
                "top_percent_label": label,
                "interpretation": interpretation,
            },
            "charts": {
                "cohort_positioning": {
                    "current": {"x": pct, "y": fri},
                    "percentile_0to1": pct,
                    "top_percent_label": label,
                    "interpretation": interpretation,
                },
            },
            "sri": {
                "score": round2(sri.sri),
                "band": sri.band,
                "interpretation": sri.notes,
            },
            "diagnostics": {
                "computed_rubric": computed.as_dict(),
                "transition_jump_score": round3(jump),
                "meta_imbalance_score": round3(imbalance),
                "sri": {k: (round3(v) if isinstance(v, float) else v)
                        for k, v in sri.diagnostics.items()},
            },
        }
    }
