"""
API Key Auth

Keys come from NEUPRINT_API_KEYS (comma-separated). Only their SHA-256
hashes are kept. With no keys configured the service runs in dev mode
and every request is let through.

Usage:
    from neuprint.auth import require_api_key
    @app.post("/analyze")
    async def analyze(key_id: Optional[str] = Depends(require_api_key)): ...
"""

from __future__ import annotations

import hashlib
import os
import secrets
from typing import Iterable, Optional

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)
KEY_PREFIX = "np_"


def hash_key(api_key: str) -> str:
    return hashlib.sha256(api_key.encode()).hexdigest()


class KeyStore:
    """Set of accepted key hashes."""

    def __init__(self, keys: Iterable[str] = ()):
        self._hashes = {hash_key(k.strip()) for k in keys if k and k.strip()}

    @classmethod
    def from_env(cls, var: str = "NEUPRINT_API_KEYS") -> "KeyStore":
        return cls(os.getenv(var, "").split(","))

    @property
    def enabled(self) -> bool:
        return bool(self._hashes)

    def verify(self, api_key: Optional[str]) -> bool:
        return bool(api_key) and hash_key(api_key) in self._hashes

    def key_id(self, api_key: str) -> str:
        """Short hash prefix, safe to log."""
        return hash_key(api_key)[:12]


key_store = KeyStore.from_env()
AUTH_ENABLED = key_store.enabled


async def require_api_key(
    api_key: Optional[str] = Security(API_KEY_HEADER),
) -> Optional[str]:
    """
    Validate X-API-Key. Returns the key ID for logging and rate limiting,
    or None in dev mode. 401 when the header is missing, 403 when wrong.
    """
    if not key_store.enabled:
        return None

    if not api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing API key. Include X-API-Key header.",
        )
    if not key_store.verify(api_key):
        raise HTTPException(status_code=403, detail="Invalid API key.")

    return key_store.key_id(api_key)


def generate_api_key() -> str:
    """New random key for provisioning."""
    return f"{KEY_PREFIX}{secrets.token_urlsafe(32)}"
