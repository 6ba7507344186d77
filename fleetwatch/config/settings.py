"""Application settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_sessions_dir() -> Path:
    return Path.home() / ".clawdbot" / "agents" / "main" / "sessions"


def _default_workspace() -> Path:
    return Path.home() / "Code Projects"


class Settings(BaseSettings):
    """
    Central configuration for the fleetwatch application.

    All settings can be overridden via environment variables.
    Prefix is not used to allow standard env var names (e.g., LOG_LEVEL).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["auto", "json", "console"] = "auto"  # auto: json in production

    # Agent session data (sessions.json + <sessionId>.jsonl transcripts)
    sessions_dir: Path = Field(default_factory=_default_sessions_dir)

    # Persisted alert state
    workspace_path: Path = Field(default_factory=_default_workspace)
    alerts_file: Path | None = None
    pending_notifications_file: Path | None = None

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_keys: str = ""  # Comma-separated; empty = dev mode (no auth)
    cors_origins: str = "http://localhost:3000"
    cors_allow_credentials: bool = True

    # Observability
    metrics_port: int = 8001

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def api_key_set(self) -> frozenset[str]:
        """Accepted X-API-KEY values. Empty means authentication is off."""
        return frozenset(k.strip() for k in self.api_keys.split(",") if k.strip())

    @property
    def json_logs(self) -> bool:
        if self.log_format == "auto":
            return self.is_production
        return self.log_format == "json"

    @property
    def alerts_path(self) -> Path:
        """Backing document for the persisted alert store."""
        if self.alerts_file is not None:
            return self.alerts_file
        return self.workspace_path / "squad" / "alerts" / "alerts.json"

    @property
    def pending_notifications_path(self) -> Path:
        """Queue file read by the external notification dispatcher."""
        if self.pending_notifications_file is not None:
            return self.pending_notifications_file
        return self.workspace_path / "squad" / "alerts" / "pending-notifications.json"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    Clear cache with get_settings.cache_clear() if needed.
    """
    return Settings()
