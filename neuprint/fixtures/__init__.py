"""
Bundled analysis fixtures.

analysis_input_v1.json is a complete envelope (analysis_input,
narrative_text, meta). The HTTP endpoint and the CLI fall back to it
when no input is supplied.
"""

from __future__ import annotations

import copy
import json
from functools import lru_cache
from pathlib import Path

FIXTURE_DIR = Path(__file__).resolve().parent
DEFAULT_FIXTURE = "analysis_input_v1.json"


@lru_cache(maxsize=8)
def _read(name: str) -> dict:
    with open(FIXTURE_DIR / name, encoding="utf-8") as f:
        return json.load(f)


def load_fixture(name: str = DEFAULT_FIXTURE) -> dict:
    """A fresh copy of the named fixture envelope."""
    return copy.deepcopy(_read(name))
