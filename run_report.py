#!/usr/bin/env python3
"""
run_report.py — Build a NeuPrint report from the command line.

Usage:
    python run_report.py                          # Bundled fixture, summary view
    python run_report.py --input envelope.json    # Custom envelope or analysis input
    python run_report.py --section cff --json     # One section as JSON
    python run_report.py --cohort peers.json      # Peer FRI list for cohort positioning

Exit code 2 when the report carries section errors.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from neuprint.fixtures import load_fixture
from neuprint.logging import setup_logging
from neuprint.report import build_report

SECTIONS = ("rsl", "cff", "rc", "rfs")


def load_envelope(path: str | None) -> dict:
    if path is None:
        return load_fixture()
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    if "analysis_input" not in data:
        data = {"analysis_input": data}
    return data


def apply_cohort(envelope: dict, path: str) -> None:
    peers = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(peers, list):
        raise ValueError(f"{path}: expected a JSON list of FRI scores")
    envelope["analysis_input"]["cohort_fri_list"] = peers


def format_summary(report: dict) -> str:
    rsl, cff, rc, rfs = (report.get(s, {}) for s in SECTIONS)
    lines = [
        f"Verification ID:   {report['meta']['verification_id']}",
        f"RSL level:         {rsl.get('level')} ({rsl.get('level_meta', {}).get('level_full_name', '')})",
        f"FRI:               {rsl.get('fri', {}).get('score')}  "
        f"[{rsl.get('cohort', {}).get('top_percent_label', '')}]",
        f"SRI:               {rsl.get('sri', {}).get('score')} {rsl.get('sri', {}).get('band', '')}",
        f"Final type:        {cff.get('final_type', {}).get('label')} "
        f"(confidence {cff.get('final_type', {}).get('confidence')})",
        f"Pattern:           {cff.get('pattern', {}).get('primary_label')} / "
        f"{cff.get('pattern', {}).get('secondary_label')}",
        f"Control pattern:   {rc.get('control_pattern')} [{rc.get('reliability_band')}]",
        f"Determination:     {rc.get('reasoning_control_distribution', {}).get('final_determination')}",
        f"Style:             {rfs.get('primary_pattern')} ({rfs.get('representative_phrase')})",
    ]
    for line in rfs.get("summary_lines", []):
        lines.append(f"  {line}")
    for name, err in report.get("errors", {}).items():
        lines.append(f"ERROR [{name}] {err['type']}: {err['message']}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="NeuPrint Report Runner")
    parser.add_argument(
        "--input",
        default=None,
        help="Envelope or analysis-input JSON file (default: bundled fixture)",
    )
    parser.add_argument(
        "--section",
        choices=SECTIONS,
        default=None,
        help="Print only one report section",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of the summary view",
    )
    parser.add_argument(
        "--cohort",
        default=None,
        help="JSON list of peer FRI scores for cohort positioning",
    )
    args = parser.parse_args(argv)

    setup_logging(level="WARNING", fmt="text", stream=sys.stderr)

    try:
        envelope = load_envelope(args.input)
        if args.cohort:
            apply_cohort(envelope, args.cohort)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    report = build_report(envelope)

    if args.section:
        payload = {args.section: report.get(args.section, {})}
        if "errors" in report:
            payload["errors"] = report["errors"]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    elif args.json:
        print(json.dumps(report, indent=2, ensure_ascii=False))
    else:
        print(format_summary(report))

    return 2 if "errors" in report else 0


if __name__ == "__main__":
    sys.exit(main())
