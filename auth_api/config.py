"""
Application Configuration.

Pydantic Settings model for the auth API client.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import model_validator


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Backend ---
    AUTH_API_BASE_URL: str = ""
    AUTH_BASE_PATH: str = "/api/v1/auth"

    # --- Transport ---
    HTTP_TIMEOUT_S: float = 10.0

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""  # empty: console only
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_backend_settings(self) -> "AppConfig":
        """Reject a malformed endpoint prefix and warn on a missing origin.

        An empty ``AUTH_API_BASE_URL`` is tolerated so that tests and
        tooling can build a config without a backend; every request will
        then fail with a network classification.
        """
        if not self.AUTH_BASE_PATH.startswith("/"):
            raise ValueError("AUTH_BASE_PATH must start with '/'")

        if not self.AUTH_API_BASE_URL:
            logging.getLogger("auth_api.config").warning(
                "AUTH_API_BASE_URL is empty; requests to the auth backend "
                "will fail until it is configured."
            )

        return self

    @property
    def log_level(self) -> int:
        """``LOG_LEVEL`` resolved to a ``logging`` level number."""
        resolved = logging.getLevelName(self.LOG_LEVEL.upper())
        return resolved if isinstance(resolved, int) else logging.INFO


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    Uses a check-lock-check pattern to avoid the lock overhead on the
    fast path while remaining thread-safe during first initialisation.

    Prefer direct constructor injection of ``AppConfig`` in new code.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next ``get_config()`` re-reads the environment."""
    global _config_instance
    with _config_lock:
        _config_instance = None
