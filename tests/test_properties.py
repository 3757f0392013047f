"""
Cross-cutting properties: bounded scores under hostile input, level
monotonicity, rubric scaling, empty-input shapes and the reference
scenarios.
"""

import itertools
import math

import pytest

from neuprint.archetypes import LEVEL_CODES
from neuprint.cff import CoreAxes, compute_cff6, derive_cff, observed_patterns, profile_scores
from neuprint.features import RawFeatures
from neuprint.rc import (
    compute_control_vector,
    derive_rc,
    human_rhythm_index,
    revision_depth,
    structural_variance,
    transition_flow,
)
from neuprint.rfs import RoleConfig, RoleFitInput, compute_job_group_top3, derive_rfs, score_role
from neuprint.rsl import (
    LevelFlags,
    Rubric4,
    classify_level,
    compute_rubric,
    derive_rsl,
    meta_imbalance_score,
    transition_jump_score,
)

HOSTILE = {
    "units": -5,
    "claims": float("nan"),
    "reasons": float("inf"),
    "evidence": 1e12,
    "warrants": "lots",
    "transitions": 1e9,
    "transition_ok": 5e9,
    "revisions": -1,
    "revision_depth_sum": float("inf"),
    "intent_markers": 1e6,
    "drift_segments": 1e6,
    "hedges": None,
    "adjacency_links": -3,
    "backend_reserved": {"kpf_sim": 9.0, "tps_h": -4.0},
}


def _hostile_raws():
    yield RawFeatures.from_mapping(HOSTILE)
    yield RawFeatures.from_mapping({"units": 1e9, "claims": 1e9, "transitions": 1e9})
    yield RawFeatures()


# ============================================================
# BOUNDED OUTPUTS
# ============================================================

class TestBounded:
    @pytest.mark.parametrize("raw", list(_hostile_raws()))
    def test_unit_scores(self, raw):
        values = list(compute_cff6(raw).values())
        values += list(compute_control_vector(raw).as_tuple())
        values += [
            structural_variance(raw), human_rhythm_index(raw),
            transition_flow(raw), revision_depth(raw),
            transition_jump_score(raw), meta_imbalance_score(raw),
        ]
        core = CoreAxes(**compute_cff6(raw), KPF=1.0, TPS=0.0)
        values += [v for v in profile_scores(core).values() if v is not None]
        for v in values:
            assert not math.isnan(v)
            assert 0.0 <= v <= 1.0

    @pytest.mark.parametrize("raw", list(_hostile_raws()))
    def test_rubric_in_range(self, raw):
        for v in compute_rubric(raw).as_dict().values():
            assert 0.0 <= v <= 5.0

    def test_hostile_payload_derives(self):
        payload = {"raw_features": HOSTILE}
        assert derive_rsl(payload)["rsl"]["level"] in LEVEL_CODES
        cff = derive_cff(payload)["cff"]
        for v in cff["values_0to1"]:
            assert v == "N/A" or 0.0 <= v <= 1.0
        assert derive_rc(payload)["rc"]["control_pattern"]


# ============================================================
# LEVEL LADDER
# ============================================================

class TestMonotonicLevel:
    def test_raising_a_dimension_never_lowers_the_level(self):
        flags = LevelFlags()
        for base in itertools.product(range(6), repeat=4):
            rubric = Rubric4(*base)
            level = classify_level(rubric, evidence_count=3, evidence_link_rate=1.0,
                                   flags=flags).level_number
            for i in range(4):
                if base[i] == 5:
                    continue
                bumped = list(base)
                bumped[i] += 1
                higher = classify_level(Rubric4(*bumped), evidence_count=3,
                                        evidence_link_rate=1.0, flags=flags).level_number
                assert higher >= level

    def test_vector_rescales_to_rubric(self):
        rubric = Rubric4(coherence=4.2, structure=3.15, evaluation=0.0, integration=5.0)
        rescaled = [round(v * 5, 2) for v in rubric.as_vector()]
        assert rescaled == pytest.approx(list(rubric.as_dict().values()))


# ============================================================
# REFERENCE SCENARIOS
# ============================================================

class TestScenarios:
    def test_rich_structure_clusters_high(self):
        # Reference counts plus intent, adjacency, counter and revision signals
        counts = {
            "units": 10, "claims": 4, "reasons": 4, "evidence": 4, "warrants": 2,
            "transitions": 5, "transition_ok": 5,
            "intent_markers": 2, "adjacency_links": 14,
            "counterpoints": 2, "refutations": 1,
            "revisions": 2, "revision_depth_sum": 3,
            "self_regulation_signals": 2,
        }
        rubric = compute_rubric(RawFeatures.from_mapping(counts))
        for v in rubric.as_dict().values():
            assert v > 3.5

        rsl = derive_rsl({"raw_features": counts}, flags=LevelFlags())["rsl"]
        assert int(rsl["level"][1:]) >= 4

    def test_full_axes_score_caps_at_one(self):
        fit = RoleFitInput(
            axes={"analyticity": 1, "flow": 1, "metacognition": 1, "authenticity": 1},
            arc_level=10,
        )
        cfg = RoleConfig.from_mapping({
            "job_id": "teacher",
            "neuprint_axes_weights": {
                "analyticity": 0.25, "flow": 0.25, "metacognition": 0.25, "authenticity": 0.25,
            },
            "min_requirements": {"arc_level": 1},
        })
        assert score_role(fit, cfg) == 1.0

    def test_equal_scores_tie_break_by_group_name(self):
        fit = RoleFitInput(
            axes={"analyticity": 0.5, "flow": 0.5, "metacognition": 0.5, "authenticity": 0.5},
            arc_level=3,
        )
        even = {"analyticity": 0.25, "flow": 0.25, "metacognition": 0.25, "authenticity": 0.25}
        out = compute_job_group_top3(fit, [
            {"job_id": "teacher", "neuprint_axes_weights": even},
            {"job_id": "lawyer", "neuprint_axes_weights": even},
            {"job_id": "data_analyst", "neuprint_axes_weights": even},
            {"job_id": "nurse", "neuprint_axes_weights": even},
        ])
        assert [g["group_name"] for g in out["top_groups"]] == [
            "Data·AI·Intelligence",
            "Education·Research·Training",
            "Healthcare·Life Science",
        ]


# ============================================================
# EMPTY INPUT
# ============================================================

class TestEmptyInput:
    def test_rsl(self):
        rsl = derive_rsl({})["rsl"]
        assert {"level", "rubric", "fri", "cohort", "sri"} <= set(rsl)

    def test_cff(self):
        cff = derive_cff({})["cff"]
        assert {"indicators", "labels", "values_0to1", "observed_patterns",
                "pattern", "final_type"} <= set(cff)
        assert cff["final_type"]["code"] == "T2"

    def test_rc(self):
        rc = derive_rc({})["rc"]
        assert rc["control_vector"] == {"A": 0.0, "D": 0.0, "R": 0.0}
        assert rc["structural_control_signals"]["structural_variance"] == 0.0

    def test_rfs(self):
        rfs = derive_rfs({})["rfs"]
        assert rfs["style_id"] == 9

    def test_observed_patterns_on_empty_core(self):
        assert observed_patterns(CoreAxes())["profiles"] == []
