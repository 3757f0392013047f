"""
NeuPrint — Deterministic Reasoning-Structure Reports

Turns structural counts extracted from a piece of writing into a
four-section report:

  - rsl:  reasoning level L1-L6, FRI with cohort position, SRI
  - cff:  cognitive fingerprint indicators, observed patterns, final type
  - rc:   reasoning control pattern and Human/Hybrid/AI distribution
  - rfs:  cognitive style and job-group role fit

Public API:
  - derive:        analysis input -> report sections
  - build_report:  envelope -> stamped report (meta + narrative overlay)
  - derive_rsl / derive_cff / derive_rc / derive_rfs: single sections
  - AnalysisInput, RawFeatures: typed input views
  - NeuPrintError, RoleConfigError

Usage:
    from neuprint import derive, build_report
    from neuprint.fixtures import load_fixture
    report = build_report(load_fixture())
"""

__version__ = "1.0.0"

from neuprint.errors import NeuPrintError, RoleConfigError
from neuprint.features import AnalysisInput, RawFeatures
from neuprint.rsl import derive_rsl
from neuprint.cff import derive_cff
from neuprint.rc import derive_rc
from neuprint.rfs import derive_rfs
from neuprint.merge import deep_merge, deep_merge_all
from neuprint.pipeline import derive, SectionResult
from neuprint.report import build_report

__all__ = [
    "NeuPrintError",
    "RoleConfigError",
    "AnalysisInput",
    "RawFeatures",
    "derive_rsl",
    "derive_cff",
    "derive_rc",
    "derive_rfs",
    "deep_merge",
    "deep_merge_all",
    "derive",
    "SectionResult",
    "build_report",
]
