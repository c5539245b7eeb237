"""Runtime configuration for ytd-relay.

Values come from environment variables prefixed with ``YTD_RELAY_``
(or a local ``.env`` file).  Components never read the environment
themselves — they receive the values they need through their
constructors, which keeps the core testable without monkeypatching.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="YTD_RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Public links
    base_url: str = "http://localhost:3000"
    downloads_dir: Path = Path("./downloads")

    # File lifecycle
    file_expiry_hours: float = 4.0
    sweep_interval_seconds: float = 3600.0
    sweep_on_boot: bool = False

    # Format selection
    max_format_choices: int = 25

    # Extraction
    audio_bitrate_kbps: int = 192
    # Checked whenever yt-dlp reports progress or post-processing; a stalled
    # connection is also capped by a socket timeout of at most 30s.
    job_timeout_seconds: float | None = None

    # Logging
    log_level: str = "INFO"

    @field_validator(
        "file_expiry_hours",
        "sweep_interval_seconds",
        "max_format_choices",
        "audio_bitrate_kbps",
    )
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("job_timeout_seconds")
    @classmethod
    def timeout_positive_or_unset(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("must be > 0 when set")
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def file_expiry_seconds(self) -> float:
        return self.file_expiry_hours * 3600

    def ensure_directories(self) -> None:
        """Create the downloads directory if it doesn't exist."""
        self.downloads_dir.mkdir(parents=True, exist_ok=True)


def load_settings() -> Settings:
    """Build a fresh :class:`Settings` from the current environment."""
    return Settings()
