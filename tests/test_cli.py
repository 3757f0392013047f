"""
Tests for the run_report command-line entry point.
"""

import json

from run_report import main


class TestCLI:
    def test_summary_view(self, capsys):
        assert main([]) == 0
        out = capsys.readouterr().out
        assert "Verification ID:" in out
        assert "RSL level:" in out

    def test_json_output(self, capsys):
        assert main(["--json"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert set(report) >= {"meta", "rsl", "cff", "rc", "rfs"}

    def test_single_section(self, capsys):
        assert main(["--section", "rc"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert list(payload) == ["rc"]

    def test_bare_analysis_input_file(self, tmp_path, capsys):
        path = tmp_path / "input.json"
        path.write_text(json.dumps({"raw_features": {"units": 4, "claims": 2}}))
        assert main(["--input", str(path), "--section", "rsl"]) == 0
        assert json.loads(capsys.readouterr().out)["rsl"]["level"]

    def test_cohort_file(self, tmp_path, capsys):
        path = tmp_path / "peers.json"
        path.write_text(json.dumps([0.0, 0.1]))
        assert main(["--cohort", str(path), "--section", "rsl"]) == 0
        rsl = json.loads(capsys.readouterr().out)["rsl"]
        assert rsl["cohort"]["percentile_0to1"] == 1.0

    def test_section_errors_exit_2(self, tmp_path, capsys):
        from neuprint.fixtures import load_fixture
        envelope = load_fixture()
        envelope["analysis_input"]["role_configs"][0]["job_id"] = "astronaut"
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(envelope))
        assert main(["--input", str(path), "--json"]) == 2
        report = json.loads(capsys.readouterr().out)
        assert "rfs_roles" in report["errors"]

    def test_missing_file(self, tmp_path, capsys):
        assert main(["--input", str(tmp_path / "nope.json")]) == 1
        assert "Error:" in capsys.readouterr().err
