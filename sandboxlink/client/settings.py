"""Client configuration loaded from SANDBOXLINK_* environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class SandboxSettings(BaseSettings):
    """Sync client settings.

    All fields are read from environment variables with the ``SANDBOXLINK_``
    prefix.  For example, ``SANDBOXLINK_DEMO_MODE=1`` maps to ``demo_mode``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SANDBOXLINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Orchestrator ----------------------------------------------------------
    orchestrator_url: str = "http://localhost:9091"
    """Initial orchestrator endpoint.  Can be changed at runtime via ``configure``."""

    request_timeout: float = 30.0

    # -- Identity --------------------------------------------------------------
    user_id: str = "default-user"
    """Fixed user id sent with every request.

    Placeholder until the orchestrator supports real authentication.
    """

    # -- Backend selection -----------------------------------------------------
    demo_mode: bool = False
    """Serve everything from local fixtures instead of the orchestrator."""

    fixture_path: str | None = None
    """Optional JSON file with demo conversations (demo mode only)."""

    fixture_latency: float = 0.0
    """Artificial delay, in seconds, added to every demo call."""

    # -- Health ----------------------------------------------------------------
    health_check_interval: float = 30.0

    # -- Session lifecycle -----------------------------------------------------
    session_poll_interval: float = 10.0
    session_poll_attempts: int = 30
    """Polls before giving up on a starting session (30 x 10s = 5 minutes)."""


@lru_cache(maxsize=1)
def get_settings() -> SandboxSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``get_settings.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return SandboxSettings()
