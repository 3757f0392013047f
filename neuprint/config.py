"""
NeuPrint Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Versioning ---
    PIPELINE_VERSION: str = "1.0.0"
    API_VERSION: str = "1"

    # --- Report Meta ---
    VERIFY_URL: str = os.getenv("NP_VERIFY_URL", "https://neuprint.ai/verify")
    DEFAULT_INPUT_LANGUAGE: str = os.getenv("NEUPRINT_INPUT_LANGUAGE", "EN")

    # --- RSL Level Gates ---
    RSL_STRICT_MODE: bool = _flag("NEUPRINT_RSL_STRICT", "false")
    RSL_ALLOW_L6: bool = _flag("NEUPRINT_RSL_ALLOW_L6", "true")
    RSL_EVIDENCE_REQUIRED: bool = _flag("NEUPRINT_RSL_EVIDENCE_REQUIRED", "true")

    # --- CFF Final Type ---
    CFF_T2_MODE: str = os.getenv("NEUPRINT_CFF_T2_MODE", "Regulation")
    CFF_CONSERVATIVE_LOCK: bool = _flag("NEUPRINT_CFF_CONSERVATIVE_LOCK", "true")

    # --- RFS Role Fit ---
    RFS_STRICT_MIN_FILTER: bool = _flag("NEUPRINT_RFS_STRICT_MIN_FILTER", "true")

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("NEUPRINT_LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = os.getenv("NEUPRINT_LOG_FORMAT", "json")  # "json" or "text"

    # --- Server ---
    HOST: str = os.getenv("NEUPRINT_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("NEUPRINT_PORT", "8000"))

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("NEUPRINT_CORS_ORIGINS", "*")


settings = Settings()
