"""
API Integration Tests — Endpoint Verification

Tests every public API endpoint using FastAPI's TestClient, in dev
mode (no API keys configured) unless a test installs a key store.

These tests catch:
  - Schema mismatches (response model vs actual report)
  - Route registration issues
  - Middleware/dependency injection bugs
  - Response format regressions
"""

from __future__ import annotations

import re

import pytest
from fastapi.testclient import TestClient

from neuprint import auth
from neuprint.auth import KeyStore
from neuprint.fixtures import load_fixture
from neuprint.rate_limit import rate_limiter


# --- Fixtures ---

@pytest.fixture(scope="module")
def client():
    """Create a test client for the NeuPrint API."""
    from api.main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture
def keyed(monkeypatch):
    """Install a key store with one valid key."""
    monkeypatch.setattr(auth, "key_store", KeyStore(["np_test_key"]))
    yield "np_test_key"
    rate_limiter.reset()


# ============================================================
# HEALTH
# ============================================================

class TestHealth:
    def test_health_returns_200(self, client):
        r = client.get("/health")
        assert r.status_code == 200

    def test_health_fields(self, client):
        data = client.get("/health").json()
        assert data["status"] == "operational"
        assert data["version"] == "1.0.0"
        assert data["api_version"] == "1"
        assert "auth_enabled" in data
        assert "rate_limit_enabled" in data

    def test_security_headers(self, client):
        r = client.get("/health")
        assert r.headers["X-NeuPrint-Version"] == "1.0.0"
        assert r.headers["X-Pipeline-Version"] == "1.0.0"
        assert r.headers["X-Content-Type-Options"] == "nosniff"
        assert r.headers["X-Frame-Options"] == "DENY"


# ============================================================
# ANALYZE
# ============================================================

class TestAnalyze:
    def test_no_body_uses_fixture(self, client):
        r = client.post("/analyze")
        assert r.status_code == 200
        data = r.json()
        assert re.fullmatch(r"NP-\d{4}-\d{4}-\d{4}", data["meta"]["verification_id"])
        assert data["rsl"]["summary"]["one_line"].startswith("A coordinated argument")
        assert data["errors"] is None

    def test_empty_body_uses_fixture(self, client):
        data = client.post("/analyze", json={}).json()
        assert len(data["rfs"]["top_groups"]) == 3

    def test_fixture_matches_library(self, client):
        from neuprint.pipeline import derive
        data = client.post("/analyze", json=load_fixture()).json()
        expected = derive(load_fixture())
        assert data["rsl"]["level"] == expected["rsl"]["level"]
        assert data["cff"]["final_type"] == expected["cff"]["final_type"]
        assert data["rc"]["reasoning_control_distribution"] == \
            expected["rc"]["reasoning_control_distribution"]

    def test_custom_input(self, client):
        r = client.post("/analyze", json={
            "analysis_input": {
                "raw_features": {"layer_0": {"units": 6, "claims": 3, "reasons": 3, "evidence": 2}},
            },
            "meta": {"input_language": "KO"},
        })
        assert r.status_code == 200
        data = r.json()
        assert data["meta"]["input_language"] == "KO"
        assert data["rsl"]["summary"] == {"one_line": "", "paragraph": ""}
        assert "top_groups" not in data["rfs"]
        assert data["cff"]["values_0to1"][-2:] == ["N/A", "N/A"]

    def test_narrative_overlay_on_custom_input(self, client):
        data = client.post("/analyze", json={
            "analysis_input": {"raw_features": {"units": 3}},
            "narrative_text": {"rsl": {"summary": {"one_line": "Brief."}}},
        }).json()
        assert data["rsl"]["summary"]["one_line"] == "Brief."

    def test_role_config_errors_reported(self, client):
        payload = load_fixture()
        payload["analysis_input"]["role_configs"][0]["job_id"] = "astronaut"
        r = client.post("/analyze", json=payload)
        assert r.status_code == 200
        data = r.json()
        assert data["errors"]["rfs_roles"]["type"] == "RoleConfigError"
        assert data["rfs"]["primary_pattern"]

    def test_rejects_non_object_input(self, client):
        r = client.post("/analyze", json={"analysis_input": [1, 2, 3]})
        assert r.status_code == 422

    def test_body_too_large(self, client):
        r = client.post(
            "/analyze",
            content=b"x" * (1_048_576 + 1),
            headers={"Content-Type": "application/json"},
        )
        assert r.status_code == 413


# ============================================================
# ARCHETYPES
# ============================================================

class TestArchetypes:
    def test_catalog(self, client):
        r = client.get("/archetypes")
        assert r.status_code == 200
        data = r.json()
        assert set(data["rsl_levels"]) == {"L1", "L2", "L3", "L4", "L5", "L6"}
        assert len(data["observed_profiles"]) == 8
        assert len(data["control_patterns"]) == 9
        assert len(data["signal_library"]) == 18
        assert len(data["reasoning_styles"]) == 9
        assert len(data["job_groups"]) == 15


# ============================================================
# AUTH
# ============================================================

class TestAuth:
    def test_missing_key(self, client, keyed):
        r = client.post("/analyze")
        assert r.status_code == 401

    def test_invalid_key(self, client, keyed):
        r = client.post("/analyze", headers={"X-API-Key": "np_wrong"})
        assert r.status_code == 403

    def test_valid_key(self, client, keyed):
        r = client.post("/analyze", headers={"X-API-Key": keyed})
        assert r.status_code == 200

    def test_health_stays_open(self, client, keyed):
        assert client.get("/health").status_code == 200
