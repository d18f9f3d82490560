"""Application configuration schema and validation."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SimConfig(BaseSettings):
    """Simulation configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_game_count: int = Field(
        default=1000,
        ge=1,
        le=10000,
        description="Default number of simulated games per batch",
    )
    detail_game_threshold: int = Field(
        default=1000,
        ge=0,
        le=10000,
        description="Per-game detail records are collected only at or below this game count",
    )
    progress_min_interval: int = Field(
        default=100,
        ge=1,
        description="Lower clamp for the progress event cadence (games)",
    )
    progress_max_interval: int = Field(
        default=1000,
        ge=1,
        description="Upper clamp for the progress event cadence (games)",
    )
    yield_every_games: int = Field(
        default=1000,
        ge=1,
        description="Games between cooperative yields to the event loop",
    )
    optimizer_eval_game_cap: int = Field(
        default=1000,
        ge=1,
        le=10000,
        description="Maximum games per fitness evaluation during optimization",
    )
    optimizer_patience: int = Field(
        default=10,
        ge=1,
        description="Consecutive non-improving iterations before early stop",
    )
    remote_swap_every: int = Field(
        default=5,
        ge=1,
        description="Every Nth iteration swaps two distant lineup slots",
    )
    remote_swap_min_distance: int = Field(
        default=3,
        ge=1,
        le=8,
        description="Minimum index distance for a remote swap",
    )
    default_max_iterations: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Default optimizer iteration budget",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for the default random generator (None = OS entropy)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("progress_max_interval")
    @classmethod
    def validate_progress_max(cls, v: int, info) -> int:
        """Ensure progress_max_interval >= progress_min_interval."""
        if "progress_min_interval" in info.data and v < info.data["progress_min_interval"]:
            raise ValueError("progress_max_interval must be >= progress_min_interval")
        return v


_config: SimConfig | None = None


def get_config() -> SimConfig:
    """Get or create the singleton SimConfig instance."""
    global _config
    if _config is None:
        _config = SimConfig()
    return _config


def reset_config() -> None:
    """Drop the cached SimConfig so the next get_config() re-reads the environment."""
    global _config
    _config = None
