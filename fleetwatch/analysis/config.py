"""Transcript analysis and alert synthesis configuration.

Controls the transcript window, idle/error/token thresholds, stale-session
cutoff, and per-request fan-out. All settings can be overridden via
``ANALYSIS_*`` environment variables.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisConfig(BaseSettings):
    """Configuration for transcript analysis and alert synthesis."""

    model_config = SettingsConfigDict(
        env_prefix="ANALYSIS_",
        case_sensitive=False,
        extra="ignore",
    )

    transcript_tail_records: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Most recent transcript records inspected per session",
    )

    # Idle (stuck) thresholds
    idle_threshold_minutes: float = Field(
        default=30.0,
        gt=0,
        description="Idle minutes above which a stuck alert fires (low)",
    )
    idle_medium_minutes: float = Field(
        default=120.0,
        gt=0,
        description="Idle minutes above which a stuck alert becomes medium",
    )

    # Error count thresholds
    error_high_count: int = Field(
        default=1,
        ge=0,
        description="Error count above which an error alert becomes high",
    )
    error_critical_count: int = Field(
        default=3,
        ge=0,
        description="Error count above which an error alert becomes critical",
    )

    # Token usage thresholds
    token_usage_threshold: int = Field(
        default=100_000,
        ge=0,
        description="Total tokens above which high_token_usage fires (medium)",
    )
    token_usage_high: int = Field(
        default=150_000,
        ge=0,
        description="Total tokens above which high_token_usage becomes high",
    )

    stale_session_hours: float = Field(
        default=24.0,
        gt=0,
        description="Sessions not updated within this window are not analysed",
    )

    max_concurrent_reads: int = Field(
        default=8,
        ge=1,
        le=256,
        description="Upper bound on concurrent transcript reads per request",
    )

    @model_validator(mode="after")
    def _check_ordering(self) -> "AnalysisConfig":
        if self.idle_medium_minutes < self.idle_threshold_minutes:
            raise ValueError("idle_medium_minutes must be >= idle_threshold_minutes")
        if self.error_critical_count < self.error_high_count:
            raise ValueError("error_critical_count must be >= error_high_count")
        if self.token_usage_high < self.token_usage_threshold:
            raise ValueError("token_usage_high must be >= token_usage_threshold")
        return self
