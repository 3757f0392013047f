"""
Structured Logging — Report-Scoped JSON Lines

Every log line emitted while a report is being built carries the
report it belongs to. build_report() opens a report_context() with the
verification ID, and the pipeline opens a nested one per step, so a
warning from the role ranker reads:

    {"level": "WARNING", "logger": "neuprint.pipeline",
     "message": "Section rfs_roles failed: ...",
     "report": {"verification_id": "NP-2026-1016-0042",
                "section": "rfs", "step": "rfs_roles"},
     "error_type": "RoleConfigError", ...}

Report fields (ID, section, step, level, type, pattern) are grouped
under "report"; request fields (method, path, status, timing, key) stay
at the top level. Anything else passed via extra= is dropped.

Usage:
    from neuprint.logging import get_logger, report_context
    logger = get_logger("api")
    with report_context(verification_id="NP-2026-1016-0042", section="rsl"):
        logger.info("Level classified", extra={"rsl_level": "L4"})
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from neuprint.config import settings


REPORT_FIELDS = (
    "verification_id", "section", "step",
    "rsl_level", "final_type", "control_pattern", "determination",
)
REQUEST_FIELDS = (
    "key_id", "method", "path", "status_code", "duration_ms",
    "error", "error_type",
)

# Only these are bound by report_context(); the rest arrive via extra=
CONTEXT_FIELDS = ("verification_id", "section", "step")

_context: contextvars.ContextVar[dict] = contextvars.ContextVar(
    "neuprint_report_context", default={}
)


@contextmanager
def report_context(**fields: Optional[str]) -> Iterator[dict]:
    """
    Bind report fields for every record logged inside the block.

    Nested blocks inherit the outer fields and may override them. Fields
    outside CONTEXT_FIELDS raise TypeError.
    """
    unknown = set(fields) - set(CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown report context fields: {sorted(unknown)}")
    merged = {**_context.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _context.set(merged)
    try:
        yield merged
    finally:
        _context.reset(token)


def current_context() -> dict:
    return dict(_context.get())


class ReportContextFilter(logging.Filter):
    """Copies the bound report fields onto records that don't set them."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context.get().items():
            if getattr(record, key, None) is None:
                setattr(record, key, value)
        return True


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        report = {
            key: getattr(record, key) for key in REPORT_FIELDS
            if getattr(record, key, None) is not None
        }
        if report:
            entry["report"] = report

        for key in REQUEST_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format; report context trails the message in brackets."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        tags = [
            str(getattr(record, key)) for key in ("verification_id", "step")
            if getattr(record, key, None) is not None
        ]
        return f"{line} [{' '.join(tags)}]" if tags else line


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None, stream=None):
    """
    Configure the neuprint logger. Call once at startup.

    level and fmt default to NEUPRINT_LOG_LEVEL / NEUPRINT_LOG_FORMAT;
    output goes to stdout unless a stream is given (the CLI uses stderr).
    """
    root = logging.getLogger("neuprint")
    root.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(ReportContextFilter())
    if (fmt or settings.LOG_FORMAT) == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the neuprint namespace."""
    return logging.getLogger(f"neuprint.{name}")
