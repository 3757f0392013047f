"""
Tests for the orchestrator, deep merge and report assembly.
"""

import copy
import random
import re
from datetime import datetime, timezone

import pytest

from neuprint.errors import RoleConfigError
from neuprint.fixtures import load_fixture
from neuprint.merge import deep_merge, deep_merge_all
from neuprint.meta import build_meta, generate_verification_id
from neuprint.pipeline import SectionResult, derive, run_section, run_sections
from neuprint.report import build_report, overlay_narrative


def _broken_roles_payload() -> dict:
    payload = load_fixture()
    payload["analysis_input"]["role_configs"][0]["neuprint_axes_weights"]["flow"] = 0.9
    return payload


# ============================================================
# DEEP MERGE
# ============================================================

class TestDeepMerge:
    def test_nested_maps_merge(self):
        out = deep_merge({"rfs": {"a": 1, "n": {"x": 1}}}, {"rfs": {"b": 2, "n": {"y": 2}}})
        assert out == {"rfs": {"a": 1, "b": 2, "n": {"x": 1, "y": 2}}}

    def test_lists_replace(self):
        assert deep_merge({"k": [1, 2]}, {"k": [3]}) == {"k": [3]}

    def test_inputs_untouched(self):
        base = {"a": {"b": [1]}}
        override = {"a": {"c": 2}}
        snapshot = copy.deepcopy(base)
        out = deep_merge(base, override)
        out["a"]["b"].append(9)
        assert base == snapshot
        assert override == {"a": {"c": 2}}

    def test_merge_all_skips_non_mappings(self):
        assert deep_merge_all({"a": 1}, None, {"b": 2}) == {"a": 1, "b": 2}


# ============================================================
# SECTION RESULTS
# ============================================================

class TestRunSection:
    def test_success(self):
        result = run_section("rsl", lambda: {"rsl": {"level": "L3"}})
        assert result.ok is True
        assert result.error_info is None

    def test_role_config_error_is_captured(self):
        def fail():
            raise RoleConfigError("bad weights")

        result = run_section("rfs_roles", fail)
        assert result.ok is False
        assert result.data == {}
        assert result.error_info == {"type": "RoleConfigError", "message": "bad weights"}

    def test_other_errors_propagate(self):
        def fail():
            raise KeyError("bug")

        with pytest.raises(KeyError):
            run_section("cff", fail)

    def test_step_order(self):
        names = [r.name for r in run_sections(load_fixture())]
        assert names == ["rsl", "cff", "rc", "rfs", "rfs_roles"]
        assert all(isinstance(r, SectionResult) for r in run_sections({}))


# ============================================================
# DERIVE
# ============================================================

class TestDerive:
    def test_fixture_report(self):
        report = derive(load_fixture())
        assert set(report) == {"rsl", "cff", "rc", "rfs"}
        assert "primary_pattern" in report["rfs"]
        assert "top_groups" in report["rfs"]

    def test_deterministic(self):
        assert derive(load_fixture()) == derive(load_fixture())

    def test_does_not_mutate_input(self):
        payload = load_fixture()
        snapshot = copy.deepcopy(payload)
        derive(payload)
        assert payload == snapshot

    def test_empty_input(self):
        report = derive({})
        assert report["rsl"]["level"] == "L1"
        assert "top_groups" not in report["rfs"]
        assert "errors" not in report

    def test_invalid_roles_fail_only_their_step(self):
        report = derive(_broken_roles_payload())
        assert report["errors"]["rfs_roles"]["type"] == "RoleConfigError"
        assert "must sum to 1.0" in report["errors"]["rfs_roles"]["message"]
        assert "primary_pattern" in report["rfs"]
        assert "top_groups" not in report["rfs"]
        assert report["rsl"]["level"]
        assert report["rc"]["control_pattern"]


# ============================================================
# META
# ============================================================

class TestMeta:
    def test_verification_id_format(self):
        now = datetime(2025, 3, 7, tzinfo=timezone.utc)
        vid = generate_verification_id(now, random.Random(1))
        assert re.fullmatch(r"NP-2025-0307-\d{4}", vid)

    def test_verification_id_seeded(self):
        now = datetime(2025, 3, 7, tzinfo=timezone.utc)
        assert generate_verification_id(now, random.Random(7)) == \
            generate_verification_id(now, random.Random(7))

    def test_build_meta(self):
        now = datetime(2025, 3, 7, 12, 0, tzinfo=timezone.utc)
        meta = build_meta({"input_language": "KO"}, now=now)
        assert meta["input_language"] == "KO"
        assert meta["generated_at_utc"] == "2025-03-07T12:00:00+00:00"
        assert meta["verify_url"]
        assert meta["verification_id"].startswith("NP-2025-0307-")

    def test_default_language(self):
        assert build_meta()["input_language"]


# ============================================================
# REPORT
# ============================================================

class TestReport:
    def test_overlay(self):
        rsl = overlay_narrative({"level": "L3"}, {
            "summary": {"one_line": "Short.", "paragraph": "Longer."},
            "dimensions": [{"code": "R1"}],
        })
        assert rsl["level"] == "L3"
        assert rsl["summary"] == {"one_line": "Short.", "paragraph": "Longer."}
        assert rsl["dimensions"] == [{"code": "R1"}]

    def test_overlay_without_narrative(self):
        rsl = overlay_narrative({"level": "L3"}, None)
        assert rsl["summary"] == {"one_line": "", "paragraph": ""}
        assert rsl["dimensions"] == []

    def test_fixture_report(self):
        report = build_report(load_fixture())
        assert list(report)[0] == "meta"
        assert re.fullmatch(r"NP-\d{4}-\d{4}-\d{4}", report["meta"]["verification_id"])
        assert report["meta"]["input_language"] == "EN"
        assert report["rsl"]["summary"]["one_line"].startswith("A coordinated argument")
        assert len(report["rsl"]["dimensions"]) == 4

    def test_bare_analysis_input(self):
        report = build_report(load_fixture()["analysis_input"])
        assert report["rsl"]["level"] == derive(load_fixture())["rsl"]["level"]

    def test_errors_carried(self):
        report = build_report(_broken_roles_payload())
        assert "rfs_roles" in report["errors"]
