"""Configuration management for flowtrace."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FLOWTRACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Batching
    # 800k is a placeholder sized for a 1M-token model; tune per deployment
    max_tokens_per_batch: int = Field(800000, description="Token budget for a single analysis batch")
    default_step_token_estimate: int = Field(
        1000,
        description="Token estimate used for steps that carry none"
    )

    # Replay
    settle_delay_ms: int = Field(500, description="Fixed settle delay after network idle")
    network_idle_timeout_ms: int = Field(30000, description="Timeout for the network-idle wait")
    action_timeout_ms: int = Field(10000, description="Timeout for UI actions")
    capture_screenshots: bool = Field(True, description="Capture a screenshot per replayed step")
    wait_for_stability: bool = Field(True, description="Wait for page stability after each action")

    # Focus trap probe
    focus_trap_enabled: bool = Field(True, description="Probe visible modals for focus trapping")
    focus_trap_max_tabs: int = Field(15, description="Upper bound on DOM-level traversal steps")
    focus_trap_keyboard_max_tabs: int = Field(8, description="Upper bound on real Tab presses")

    # Logging
    log_level: str = Field("INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(False, description="Render logs as JSON")

    @field_validator("max_tokens_per_batch", "focus_trap_max_tabs", "focus_trap_keyboard_max_tabs")
    @classmethod
    def _must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
