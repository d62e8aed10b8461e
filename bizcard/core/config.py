"""
Configuration helpers for the bizcard backend.

Exposes a frozen Settings object built from environment variables so that
routers/services do not fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_UPLOADS_DIR = Path(__file__).resolve().parents[2] / "web" / "uploads"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    database_url: str
    session_ttl_seconds: int
    uploads_dir: str
    max_upload_bytes: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./bizcard.db"),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "86400"), 86400),
        uploads_dir=os.getenv("UPLOADS_DIR", str(DEFAULT_UPLOADS_DIR)),
        max_upload_bytes=_int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)), 10 * 1024 * 1024),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
