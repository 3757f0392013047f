"""
Tests for input extraction: envelope unwrapping, aliases, layered and
flat shapes, per-unit array trust.
"""

from neuprint.features import AnalysisInput, RawFeatures, unwrap_analysis_input
from neuprint.fixtures import load_fixture


# ============================================================
# UNWRAPPING
# ============================================================

class TestUnwrap:
    def test_envelope(self):
        assert unwrap_analysis_input({"analysis_input": {"a": 1}}) == {"a": 1}

    def test_inner_record(self):
        assert unwrap_analysis_input({"raw_features": {}}) == {"raw_features": {}}

    def test_non_mapping(self):
        assert unwrap_analysis_input(None) == {}
        assert unwrap_analysis_input([1, 2]) == {}


# ============================================================
# RAW FEATURES
# ============================================================

class TestRawFeatures:
    def test_layered_shape(self):
        raw = RawFeatures.from_mapping({
            "layer_0": {"units": 4, "claims": 2},
            "layer_1": {"warrants": 1, "structure_type": "networked"},
            "layer_2": {"transitions": 3, "belief_change": True},
            "layer_3": {"hedges": 2},
        })
        assert raw.units == 4
        assert raw.claims == 2
        assert raw.warrants == 1
        assert raw.structure_type == "networked"
        assert raw.transitions == 3
        assert raw.belief_change is True
        assert raw.hedges == 2

    def test_flat_shape(self):
        raw = RawFeatures.from_mapping({"units": 5, "reasons": 3, "loops": 1})
        assert raw.units == 5
        assert raw.reasons == 3
        assert raw.loops == 1

    def test_negative_and_junk_counts_become_zero(self):
        raw = RawFeatures.from_mapping({"units": -2, "claims": "many", "evidence": None})
        assert raw.units == 0
        assert raw.claims == 0
        assert raw.evidence == 0
        assert raw.unit_count == 1

    def test_unknown_structure_type_is_linear(self):
        raw = RawFeatures.from_mapping({"structure_type": "spiral"})
        assert raw.structure_type == "linear"

    def test_per_unit_length_mismatch_dropped(self):
        raw = RawFeatures.from_mapping({
            "layer_0": {
                "units": 3,
                "unit_lengths": [10, 20],
                "per_unit": {"claims": [1, 0, 1], "reasons": [1, 1]},
            },
        })
        assert raw.unit_lengths == ()
        assert raw.per_unit_series("claims") == (1.0, 0.0, 1.0)
        assert raw.per_unit_series("reasons") == ()
        assert raw.has_per_unit is True

    def test_evidence_types_map_and_list(self):
        as_map = RawFeatures.from_mapping({"evidence_types": {"stat": 2, "quote": 0}})
        as_list = RawFeatures.from_mapping({"evidence_types": ["stat", "quote", None]})
        assert as_map.evidence_types == frozenset({"stat"})
        assert as_list.evidence_types == frozenset({"stat", "quote"})

    def test_side_signals(self):
        raw = RawFeatures.from_mapping({"backend_reserved": {"kpf_sim": 0.3}})
        assert raw.kpf_sim == 0.3
        assert raw.tps_h is None

    def test_non_mapping_gives_zero_features(self):
        raw = RawFeatures.from_mapping("nope")
        assert raw == RawFeatures()


# ============================================================
# ANALYSIS INPUT
# ============================================================

class TestAnalysisInput:
    def test_fixture(self):
        ai = AnalysisInput.from_payload(load_fixture())
        assert ai.has_raw is True
        assert ai.raw.units == 10
        assert ai.raw.kpf_sim == 0.32
        assert len(ai.cohort_fri_list) == 10
        assert ai.active_signal_ids[0] == "S1"
        assert len(ai.role_configs) == 5
        assert ai.rsl_proxies == {"rsl_hypothesis": 0.55, "rsl_expansion": 0.4}

    def test_raw_aliases(self):
        ai = AnalysisInput.from_payload({"rawFeatures": {"units": 7}})
        assert ai.has_raw is True
        assert ai.raw.units == 7

    def test_missing_raw(self):
        ai = AnalysisInput.from_payload({})
        assert ai.has_raw is False
        assert ai.raw.units == 0

    def test_rubric_override(self):
        ai = AnalysisInput.from_payload({"rubric": {"coherence": 4, "structure_rubric_0to5": 3}})
        assert ai.rubric == {"coherence": 4.0, "structure": 3.0, "evaluation": 0.0, "integration": 0.0}

    def test_cohort_list_zeroes_unusable_peers(self):
        ai = AnalysisInput.from_payload(
            {"cohort_fri_list": [1, "x", None, float("nan"), float("inf"), 2.5]}
        )
        assert ai.cohort_fri_list == (1.0, 0.0, 0.0, 0.0, 0.0, 2.5)

    def test_coerce_passthrough(self):
        ai = AnalysisInput.from_payload({})
        assert AnalysisInput.coerce(ai) is ai
