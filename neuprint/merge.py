"""
Deep merge for report sections.

Mappings merge key by key, recursively. Lists and scalars from the
later source replace the earlier value wholesale; lists are never
concatenated. Inputs are left untouched.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping


def deep_merge(base: Mapping, override: Mapping) -> dict:
    out = copy.deepcopy(dict(base)) if isinstance(base, Mapping) else {}
    if not isinstance(override, Mapping):
        return out
    for key, value in override.items():
        current = out.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            out[key] = deep_merge(current, value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def deep_merge_all(*parts: Mapping) -> dict:
    """Left-to-right deep_merge; non-mapping parts are skipped."""
    out: dict[str, Any] = {}
    for part in parts:
        out = deep_merge(out, part)
    return out
