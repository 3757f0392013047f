"""
Report meta block: verification ID, timestamp, language, verify URL.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Optional

from neuprint.config import settings


def generate_verification_id(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """NP-YYYY-MMDD-NNNN in UTC, with a random four-digit sequence."""
    now = now or datetime.now(timezone.utc)
    seq = (rng or random).randrange(10000)
    return f"NP-{now:%Y}-{now:%m%d}-{seq:04d}"


def build_meta(envelope_meta: Optional[dict] = None, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now(timezone.utc)
    envelope_meta = envelope_meta or {}
    return {
        "input_language": envelope_meta.get("input_language") or settings.DEFAULT_INPUT_LANGUAGE,
        "generated_at_utc": now.isoformat(),
        "verify_url": settings.VERIFY_URL,
        "verification_id": generate_verification_id(now),
    }
