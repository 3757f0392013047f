"""
RFS — Role Fit Scorer

Two independent parts:

  1. Cognitive style: structure and exploration scores from CFF
     indicators (plus two optional RSL proxies), placed on a 3x3 grid
     at 0.67 / 0.45 into one of nine reasoning styles.
  2. Job groups: only when the caller supplies role configurations.
     Each role is scored against the four composite axes, roles roll
     up to their job group by maximum, and the top three groups are
     reported with a recommended role and the top group's narrative.

Role configurations are validated strictly; see RoleConfigError.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

from neuprint.archetypes import GROUP_BY_NAME, JOB_INDEX, REASONING_STYLES
from neuprint.cff import CoreAxes, build_indicators, derive_cff
from neuprint.config import settings
from neuprint.errors import RoleConfigError
from neuprint.features import AnalysisInput
from neuprint.merge import deep_merge
from neuprint.normalize import clamp01, round3, round_half_up, to_float, to_optional_float

logger = logging.getLogger(__name__)


# ============================================================
# COGNITIVE STYLE
# ============================================================

HIGH = 0.67
MEDIUM = 0.45


@dataclass(frozen=True)
class StyleInputs:
    aas: float = 0.0
    ctf: float = 0.0
    rmd: float = 0.0
    rdx: float = 0.0
    eds: float = 0.0
    ifd: float = 0.0
    rsl_hypothesis: float = 0.0
    rsl_expansion: float = 0.0


def structure_score(m: StyleInputs) -> float:
    return clamp01(
        0.40 * clamp01(m.rdx)
        + 0.30 * clamp01(m.aas)
        + 0.20 * clamp01(m.eds)
        + 0.10 * (1 - clamp01(m.ifd))
    )


def exploration_score(m: StyleInputs) -> float:
    return clamp01(
        0.45 * clamp01(m.ctf)
        + 0.25 * clamp01(m.rmd)
        + 0.20 * clamp01(m.rsl_hypothesis)
        + 0.10 * clamp01(m.rsl_expansion)
    )


def classify_style(structure: float, exploration: float) -> int:
    """Style ID 1-9: rows by structure band, columns by exploration band."""
    s, e = clamp01(structure), clamp01(exploration)
    row = 0 if s >= HIGH else 1 if s >= MEDIUM else 2
    col = 0 if e >= HIGH else 1 if e >= MEDIUM else 2
    return row * 3 + col + 1


def cognitive_style(inputs: StyleInputs) -> dict:
    s = structure_score(inputs)
    e = exploration_score(inputs)
    style = REASONING_STYLES[classify_style(s, e)]
    return {
        "primary_pattern": style.primary_pattern,
        "representative_phrase": style.representative_phrase,
        "style_id": style.style_id,
        "structure_score": round3(s),
        "exploration_score": round3(e),
    }


# ============================================================
# ROLE CONFIGURATION
# ============================================================

AXES = ("analyticity", "flow", "metacognition", "authenticity")
WEIGHT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class RoleFitInput:
    axes: dict[str, Any]
    arc_level: float


@dataclass(frozen=True)
class RoleConfig:
    job_id: str
    weights: dict[str, Any]
    min_arc_level: float = 0.0
    min_axes: dict[str, float] = field(default_factory=dict)
    role_code: str = ""
    onet_code: str = ""
    oecd_core_skills: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: dict) -> "RoleConfig":
        weights = data.get("neuprint_axes_weights")
        reqs = data.get("min_requirements")
        if not isinstance(weights, dict):
            weights = {}
        if not isinstance(reqs, dict):
            reqs = {}
        skills = data.get("oecd_core_skills")
        return cls(
            job_id=str(data.get("job_id", "")),
            weights={k: weights.get(k) for k in AXES},
            min_arc_level=to_float(reqs.get("arc_level")),
            min_axes={
                k: v for k, v in ((k, to_optional_float(reqs.get(k))) for k in AXES)
                if v is not None
            },
            role_code=str(data.get("role_code", "")),
            onet_code=str(data.get("onet_code", "")),
            oecd_core_skills=tuple(str(s) for s in skills) if isinstance(skills, list) else (),
        )


def _is_unit_interval(v: Any) -> bool:
    return (
        isinstance(v, (int, float))
        and not isinstance(v, bool)
        and math.isfinite(v)
        and 0 <= v <= 1
    )


def check_axes(axes: dict[str, Any], label: str) -> None:
    for k in AXES:
        v = axes.get(k)
        if not _is_unit_interval(v):
            raise RoleConfigError(f"{label}.{k} must be in [0,1]. Got: {v}")


def validate_weights(weights: dict[str, Any]) -> None:
    check_axes(weights, "neuprint_axes_weights")
    total = sum(weights[k] for k in AXES)
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise RoleConfigError(f"neuprint_axes_weights must sum to 1.0. Got sum={total:.6f}")


def arc_boost(user_arc: float, min_arc: float) -> float:
    """0.02 at the minimum arc, +0.01 per extra level beyond the first, capped at 0.04."""
    if user_arc < min_arc:
        return 0.0
    delta = user_arc - min_arc
    return clamp01(min(0.04, 0.02 + 0.01 * max(0.0, delta - 1)))


def meets_minimums(fit: RoleFitInput, cfg: RoleConfig) -> bool:
    if fit.arc_level < cfg.min_arc_level:
        return False
    return all(fit.axes[k] >= v for k, v in cfg.min_axes.items())


def score_role(fit: RoleFitInput, cfg: RoleConfig) -> float:
    check_axes(fit.axes, "input.axes")
    validate_weights(cfg.weights)
    base = sum(fit.axes[k] * cfg.weights[k] for k in AXES)
    return clamp01(base + arc_boost(fit.arc_level, cfg.min_arc_level))


# ============================================================
# JOB GROUP RANKING
# ============================================================

@dataclass
class ScoredRole:
    job_name: str
    group_name: str
    meets_minimums: bool
    score: float


def _percent(score: float) -> int:
    return int(round_half_up(score * 100))


def compute_job_group_top3(
    fit: RoleFitInput,
    role_configs: Iterable[Any],
    strict_min_filter: bool = True,
) -> dict:
    """
    Rank job groups by their best role score.

    Raises RoleConfigError on the first invalid role: unknown job_id,
    axes outside [0, 1], or weights that are out of range or don't sum
    to 1.0.
    """
    scored: list[ScoredRole] = []
    for raw_cfg in role_configs:
        cfg = raw_cfg if isinstance(raw_cfg, RoleConfig) else RoleConfig.from_mapping(raw_cfg)
        job = JOB_INDEX.get(cfg.job_id)
        if job is None:
            raise RoleConfigError(f"RoleConfig.job_id not found in JOB_INDEX: {cfg.job_id}")
        score = score_role(fit, cfg)
        scored.append(ScoredRole(
            job_name=job.job_name,
            group_name=job.group_name,
            meets_minimums=meets_minimums(fit, cfg),
            score=score,
        ))

    pool = [r for r in scored if r.meets_minimums] if strict_min_filter else scored
    if not pool:
        pool = scored

    best: dict[str, ScoredRole] = {}
    for r in pool:
        prev = best.get(r.group_name)
        if prev is None or r.score > prev.score:
            best[r.group_name] = r

    ranked = sorted(best.values(), key=lambda r: (-r.score, r.group_name))[:3]

    top_groups = []
    for r in ranked:
        group = GROUP_BY_NAME[r.group_name]
        top_groups.append({
            "group_name": r.group_name,
            "percent": _percent(r.score),
            "roles": [name for _, name in group.jobs],
            "recommended_role": r.job_name,
        })

    recommended = [g["recommended_role"] for g in top_groups]
    recommended_line = f"Recommended roles include: {', '.join(recommended)}."
    interpretation = (
        GROUP_BY_NAME[top_groups[0]["group_name"]].interpretation if top_groups else ""
    )

    return {
        "summary_lines": [
            f"{g['group_name']}: {g['percent']}%" for g in top_groups
        ] + [recommended_line],
        "top_groups": top_groups,
        "recommended_roles_top3": recommended,
        "recommended_roles_line": recommended_line,
        "pattern_interpretation": interpretation,
    }


# ============================================================
# SECTION BUILDERS
# ============================================================

def _active_scores(cff: dict) -> dict[str, float]:
    out = {}
    for code, ind in (cff.get("indicators") or {}).items():
        ind = ind or {}
        score = to_optional_float(ind.get("score"))
        out[code] = score if ind.get("status") == "Active" and score is not None else 0.0
    return out


def style_inputs(cff: dict, proxies: Optional[dict] = None) -> StyleInputs:
    scores = _active_scores(cff)
    proxies = proxies or {}
    return StyleInputs(
        aas=scores.get("AAS", 0.0),
        ctf=scores.get("CTF", 0.0),
        rmd=scores.get("RMD", 0.0),
        rdx=scores.get("RDX", 0.0),
        eds=scores.get("EDS", 0.0),
        ifd=scores.get("IFD", 0.0),
        rsl_hypothesis=to_float(proxies.get("rsl_hypothesis")),
        rsl_expansion=to_float(proxies.get("rsl_expansion")),
    )


def _arc_from_level(rsl: Optional[dict]) -> float:
    level = str((rsl or {}).get("level", "L1"))
    return to_float(level[1:], 1.0) if level.startswith("L") else 1.0


def role_fit_input(
    axes_source: Union[CoreAxes, dict],
    rsl: Optional[dict] = None,
    override: Optional[dict] = None,
) -> RoleFitInput:
    """
    CFF composite axes and RSL level, unless the caller supplied role_fit.

    axes_source is either the unrounded CoreAxes or a mapping shaped like
    the CFF section's "axes" block.
    """
    if isinstance(axes_source, CoreAxes):
        axes_src = {
            "analyticity": axes_source.analyticity,
            "flow": axes_source.flow,
            "metacognition": axes_source.metacog_raw,
            "authenticity": axes_source.authenticity,
        }
    else:
        axes_src = axes_source.get("axes") or {}
    axes: dict[str, Any] = {
        "analyticity": to_float(axes_src.get("analyticity")),
        "flow": to_float(axes_src.get("flow")),
        "metacognition": to_float(axes_src.get("metacognition")),
        "authenticity": to_float(axes_src.get("authenticity"), 0.5),
    }
    arc_level = _arc_from_level(rsl)

    if override:
        given = override.get("axes")
        if isinstance(given, dict):
            # Override values are passed through unclamped so validation sees them
            axes.update({k: given[k] for k in AXES if k in given})
        if "arc_level" in override:
            arc_level = to_float(override.get("arc_level"), arc_level)

    return RoleFitInput(axes=axes, arc_level=arc_level)


def derive_rfs_style(payload: Any, cff: Optional[dict] = None) -> dict:
    ai = AnalysisInput.coerce(payload)
    if cff is None:
        cff = derive_cff(ai)["cff"]
    return {"rfs": cognitive_style(style_inputs(cff, ai.rsl_proxies))}


def derive_rfs_roles(
    payload: Any,
    rsl: Optional[dict] = None,
    strict_min_filter: Optional[bool] = None,
) -> dict:
    """Job-group ranking; an empty dict when no role configs were supplied."""
    ai = AnalysisInput.coerce(payload)
    if not ai.role_configs:
        return {}
    if strict_min_filter is None:
        strict_min_filter = settings.RFS_STRICT_MIN_FILTER

    core = CoreAxes.from_indicators(build_indicators(ai.raw, ai.indicators))
    fit = role_fit_input(core, rsl, ai.role_fit)
    top3 = compute_job_group_top3(fit, ai.role_configs, strict_min_filter)

    logger.debug(
        "RFS roles ranked",
        extra={"section": "rfs", "step": "rfs_roles"},
    )
    return {"rfs": top3}


def derive_rfs(
    payload: Any,
    cff: Optional[dict] = None,
    rsl: Optional[dict] = None,
) -> dict:
    """Style plus job groups in one section. Raises RoleConfigError."""
    ai = AnalysisInput.coerce(payload)
    if cff is None:
        cff = derive_cff(ai)["cff"]
    return deep_merge(derive_rfs_style(ai, cff), derive_rfs_roles(ai, rsl))
