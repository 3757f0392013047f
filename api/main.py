"""
NeuPrint API — Main Application

POST /analyze     — Derive a report (bundled fixture when no input is sent)
GET  /archetypes  — Closed classification tables
GET  /health      — Health check
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from neuprint import __version__
from neuprint.archetypes import catalog
from neuprint.auth import AUTH_ENABLED, require_api_key
from neuprint.config import settings
from neuprint.fixtures import load_fixture
from neuprint.logging import get_logger, setup_logging
from neuprint.rate_limit import check_rate_limit, rate_limiter
from neuprint.report import build_report
from neuprint.schemas.report import AnalyzeRequest, HealthResponse, ReportResponse

logger = get_logger("api")


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if not AUTH_ENABLED:
        logger.warning("NEUPRINT_API_KEYS not set; running without auth (dev mode)")
    logger.info(f"NeuPrint API starting (pipeline {settings.PIPELINE_VERSION})")
    yield
    logger.info("NeuPrint API shutting down")


app = FastAPI(
    title="NeuPrint API",
    description="Deterministic reasoning-structure reports: RSL, CFF, RC and RFS",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["X-API-Key", "Content-Type", "Authorization"],
    allow_credentials=False,
)


# ============================================================
# GLOBAL ERROR HANDLER
# ============================================================

@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    """Structured 500; internals stay in the log."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={
            "error": str(exc),
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. The report could not be built."},
    )


# ============================================================
# ROUTES
# ============================================================

def _envelope(body: Optional[AnalyzeRequest]) -> dict:
    """Request envelope, falling back to the bundled fixture for analysis_input."""
    if body is None or body.analysis_input is None:
        envelope = load_fixture()
    else:
        envelope = {"analysis_input": body.analysis_input}

    if body is not None:
        if body.narrative_text is not None:
            envelope["narrative_text"] = body.narrative_text
        if body.meta is not None:
            envelope["meta"] = body.meta
    return envelope


@app.post("/analyze", response_model=ReportResponse)
async def analyze(
    body: Optional[AnalyzeRequest] = None,
    key_id: Optional[str] = Depends(require_api_key),
):
    """Derive the full report for one analysis input."""
    check_rate_limit(key_id)
    report = build_report(_envelope(body))

    if "errors" in report:
        logger.warning(
            "Report built with section errors",
            extra={
                "verification_id": report["meta"]["verification_id"],
                "error": ", ".join(sorted(report["errors"])),
                "key_id": key_id,
            },
        )
    return report


@app.get("/archetypes")
async def archetypes(key_id: Optional[str] = Depends(require_api_key)):
    """Every closed table the classifiers map onto."""
    check_rate_limit(key_id)
    return catalog()


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check — no auth required."""
    return {
        "status": "operational",
        "version": __version__,
        "api_version": settings.API_VERSION,
        "auth_enabled": AUTH_ENABLED,
        "rate_limit_enabled": rate_limiter.enabled,
    }


# ============================================================
# MIDDLEWARE
# ============================================================

@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-NeuPrint-Version"] = __version__
    response.headers["X-Pipeline-Version"] = settings.PIPELINE_VERSION
    response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains; preload"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


_MAX_BODY_BYTES = 1_048_576  # 1 MB


def _too_large() -> JSONResponse:
    return JSONResponse(status_code=413, content={"detail": "Request body too large."})


@app.middleware("http")
async def enforce_body_size_limit(request: Request, call_next):
    """Reject bodies over 1 MB, by Content-Length or by actual size."""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > _MAX_BODY_BYTES:
        return _too_large()

    if request.method in ("POST", "PUT", "PATCH"):
        body = await request.body()
        if len(body) > _MAX_BODY_BYTES:
            return _too_large()

    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    path = request.url.path
    if path == "/health":
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 1)

    logger.info(
        f"{request.method} {path} → {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response
