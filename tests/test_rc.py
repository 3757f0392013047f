"""
Tests for the RC scorer: control vector, centroid match, evidence
lines, control distribution and structural control signals.
"""

import math

import pytest

from neuprint.archetypes import CONTROL_PATTERNS, SIGNAL_BY_ID
from neuprint.cff import derive_cff
from neuprint.features import RawFeatures
from neuprint.fixtures import load_fixture
from neuprint.rc import (
    DEFAULT_MODEL,
    ControlVector,
    LogisticModel,
    compute_control_vector,
    derive_rc,
    determine_label,
    human_rhythm_index,
    nearest_centroid,
    p_human,
    reasoning_control_distribution,
    reliability_band,
    revision_depth,
    segment_count,
    segment_ranges,
    select_signal_lines,
    signal_lines_export,
    split_percentages,
    structural_variance,
    transition_flow,
)


def _percent_total(dist: dict) -> int:
    return sum(int(dist[k].rstrip("%")) for k in ("Human", "Hybrid", "AI"))


# ============================================================
# CONTROL VECTOR & CENTROIDS
# ============================================================

class TestControlVector:
    def test_empty_features(self):
        v = compute_control_vector(RawFeatures())
        assert v.as_tuple() == (0.0, 0.0, 0.0)

    def test_weighted_axes(self):
        raw = RawFeatures(
            units=10, claims=4, reasons=3, evidence=2,
            transitions=6, transition_ok=3, revisions=2, revision_depth_sum=3,
            counterpoints=1, refutations=1, intent_markers=2, drift_segments=1,
            self_regulation_signals=1,
        )
        v = compute_control_vector(raw)
        assert v.A == pytest.approx(0.3106656, abs=1e-6)
        assert v.D == pytest.approx(0.4426865, abs=1e-6)
        assert v.R == pytest.approx(0.4665476, abs=1e-6)

    def test_fixture_in_unit_cube(self):
        raw = RawFeatures.from_mapping(load_fixture()["analysis_input"]["raw_features"])
        for x in compute_control_vector(raw).as_tuple():
            assert 0.0 <= x <= 1.0

    def test_exact_centroid(self):
        match = nearest_centroid(ControlVector(0.85, 0.80, 0.80))
        assert match.pattern.key == "deep_reflective_human"
        assert match.distance == 0.0
        assert match.band == "HIGH"

    def test_origin_maps_to_shallow_ai(self):
        match = nearest_centroid(ControlVector(0.0, 0.0, 0.0))
        assert match.pattern.key == "shallow_procedural_ai"
        assert match.distance == pytest.approx(math.sqrt(0.1525))
        assert match.band == "LOW"

    def test_bands(self):
        assert reliability_band(0.05) == "HIGH"
        assert reliability_band(0.12) == "MEDIUM"
        assert reliability_band(0.15) == "MEDIUM"
        assert reliability_band(0.30) == "LOW"

    def test_labels(self):
        assert CONTROL_PATTERNS[0].label == "Deep Reflective Human"


# ============================================================
# EVIDENCE LINES
# ============================================================

class TestSignalLines:
    def test_one_per_core_group(self):
        lines = select_signal_lines(["S1", "S3", "S5", "S8", "S11", "S14", "S17"])
        assert lines == [SIGNAL_BY_ID[i].text for i in ("S1", "S5", "S8", "S14")]

    def test_fill_groups(self):
        lines = select_signal_lines(["S17", "S11"])
        assert lines == [SIGNAL_BY_ID["S11"].text, SIGNAL_BY_ID["S17"].text]

    def test_remaining_by_priority(self):
        lines = select_signal_lines(["S4", "S3", "S2"])
        assert lines == [SIGNAL_BY_ID[i].text for i in ("S2", "S3", "S4")]

    def test_unknown_ids_ignored(self):
        assert select_signal_lines(["S99", "X"]) == []

    def test_export_pads_with_empty_strings(self):
        assert signal_lines_export(["a"]) == {"1": "a", "2": "", "3": "", "4": ""}


# ============================================================
# CONTROL DISTRIBUTION
# ============================================================

class TestDistribution:
    def test_split_percentages(self):
        assert split_percentages([1 / 3, 1 / 3, 1 / 3]) == [34, 33, 33]
        assert split_percentages([0.5, 0.5, 0.0]) == [50, 50, 0]
        assert split_percentages([0, 0, 0]) == [100, 0, 0]

    def test_p_human(self):
        zeros = {k: 0.0 for k in DEFAULT_MODEL.betas}
        ones = {k: 1.0 for k in DEFAULT_MODEL.betas}
        assert p_human(zeros) == pytest.approx(1 / (1 + math.exp(2.5)))
        assert p_human(ones) == pytest.approx(1 / (1 + math.exp(-4.7)))

    def test_labels(self):
        assert determine_label({}, 0.8) == "Human"
        assert determine_label({}, 0.3) == "AI"
        assert determine_label({}, 0.6) == "Human"
        assert determine_label({}, 0.5) == "Human"

    def test_hybrid_guard(self):
        cfv = {"rdx": 0.2, "hi": 0.6, "aas": 0.7, "eds": 0.7}
        assert determine_label(cfv, 0.6) == "Hybrid"
        assert determine_label(cfv, 0.8) == "Human"

    def test_distribution_sums_to_100(self):
        for value in (0.0, 0.3, 0.5, 1.0):
            cfv = {k: value for k in DEFAULT_MODEL.betas}
            out = reasoning_control_distribution(cfv).as_dict()
            assert _percent_total(out) == 100
            assert out["final_determination"] in ("Human", "Hybrid", "AI")

    def test_model_from_mapping(self):
        assert LogisticModel.from_mapping(None) is DEFAULT_MODEL
        model = LogisticModel.from_mapping({"beta0": 1, "betas": {"aas": 2, "bogus": 5}})
        assert model.beta0 == 1.0
        assert model.betas == {"aas": 2.0}


# ============================================================
# STRUCTURAL CONTROL SIGNALS
# ============================================================

class TestStructuralSignals:
    def test_segment_count(self):
        assert segment_count(4) == 3
        assert segment_count(9) == 3
        assert segment_count(16) == 4
        assert segment_count(100) == 8

    def test_segment_ranges(self):
        assert segment_ranges(10, 3) == [(0, 3), (3, 6), (6, 10)]

    def test_no_per_unit_data(self):
        raw = RawFeatures()
        assert structural_variance(raw) == 0.0
        assert human_rhythm_index(raw) == 0.0

    def test_uniform_segments_have_no_variance(self):
        raw = RawFeatures.from_mapping({"units": 9, "per_unit": {"claims": [1] * 9}})
        assert structural_variance(raw) == pytest.approx(0.0)

    def test_revision_depth(self):
        assert revision_depth(RawFeatures(revision_depth_sum=1.5)) == 0.5
        assert revision_depth(RawFeatures(revision_depth_sum=9)) == 1.0

    def test_transition_flow_from_totals(self):
        raw = RawFeatures(transitions=4, transition_ok=4)
        assert transition_flow(raw) == pytest.approx(math.log(2))


# ============================================================
# SECTION
# ============================================================

class TestDeriveRC:
    def test_fixture_section(self):
        rc = derive_rc(load_fixture())["rc"]
        assert rc["control_pattern"] in {p.label for p in CONTROL_PATTERNS}
        assert rc["reliability_band"] in ("HIGH", "MEDIUM", "LOW")
        assert set(rc["control_vector"]) == {"A", "D", "R"}
        assert all(rc["observed_structural_signals"][k] for k in ("1", "2", "3", "4"))
        assert _percent_total(rc["reasoning_control_distribution"]) == 100
        assert set(rc["structural_control_signals"]) == {
            "structural_variance", "human_rhythm_index", "transition_flow", "revision_depth",
        }

    def test_uses_supplied_cff(self):
        payload = load_fixture()
        cff = derive_cff(payload)["cff"]
        assert derive_rc(payload, cff) == derive_rc(payload)

    def test_empty_input(self):
        rc = derive_rc({})["rc"]
        assert rc["control_pattern_code"] == "shallow_procedural_ai"
        assert rc["observed_structural_signals"]["1"] == ""
