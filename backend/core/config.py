"""
Centralized configuration for the reconciliation backend.

All environment variables and settings should be defined here
to avoid duplication across modules.
"""
import logging
import os
from functools import lru_cache


class Settings:
    """Application settings loaded from environment variables."""

    # CORS - comma-separated list of allowed origins
    ALLOWED_ORIGINS: list = os.environ.get(
        "ALLOWED_ORIGINS",
        "http://localhost:8090,http://localhost:5173,http://127.0.0.1:8090"
    ).split(",")

    # Template/export config for nebula.reconcile (empty = bundled default)
    RECONCILE_CONFIG_PATH: str = os.environ.get("RECONCILE_CONFIG_PATH", "")

    # Per-file upload cap in bytes
    MAX_UPLOAD_BYTES: int = int(os.environ.get("RECONCILE_MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))


# Singleton instance for easy import
settings = get_settings()
