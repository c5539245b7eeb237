"""Tests for environment-driven settings (config.py)."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from ytd_relay.config import Settings, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "BASE_URL",
        "DOWNLOADS_DIR",
        "FILE_EXPIRY_HOURS",
        "SWEEP_INTERVAL_SECONDS",
        "SWEEP_ON_BOOT",
        "MAX_FORMAT_CHOICES",
        "AUDIO_BITRATE_KBPS",
        "JOB_TIMEOUT_SECONDS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(f"YTD_RELAY_{name}", raising=False)
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    def test_defaults(self) -> None:
        settings = load_settings()
        assert settings.base_url == "http://localhost:3000"
        assert settings.downloads_dir == Path("./downloads")
        assert settings.file_expiry_hours == 4.0
        assert settings.file_expiry_seconds == 4 * 3600
        assert settings.sweep_interval_seconds == 3600.0
        assert settings.sweep_on_boot is False
        assert settings.max_format_choices == 25
        assert settings.audio_bitrate_kbps == 192
        assert settings.job_timeout_seconds is None


class TestEnvironment:
    def test_prefixed_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YTD_RELAY_BASE_URL", "https://files.example.com/")
        monkeypatch.setenv("YTD_RELAY_FILE_EXPIRY_HOURS", "0.5")
        monkeypatch.setenv("YTD_RELAY_SWEEP_ON_BOOT", "true")
        monkeypatch.setenv("YTD_RELAY_JOB_TIMEOUT_SECONDS", "900")

        settings = Settings()
        assert settings.base_url == "https://files.example.com"
        assert settings.file_expiry_seconds == 1800
        assert settings.sweep_on_boot is True
        assert settings.job_timeout_seconds == 900

    def test_dotenv_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("YTD_RELAY_MAX_FORMAT_CHOICES=10\n")
        assert Settings().max_format_choices == 10

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("FILE_EXPIRY_HOURS", "0"),
            ("SWEEP_INTERVAL_SECONDS", "-5"),
            ("MAX_FORMAT_CHOICES", "0"),
            ("AUDIO_BITRATE_KBPS", "-128"),
            ("JOB_TIMEOUT_SECONDS", "0"),
        ],
    )
    def test_non_positive_rejected(
        self, monkeypatch: pytest.MonkeyPatch, name: str, value: str,
    ) -> None:
        monkeypatch.setenv(f"YTD_RELAY_{name}", value)
        with pytest.raises(ValidationError):
            Settings()


class TestDirectories:
    def test_ensure_directories(self, tmp_path: Path) -> None:
        settings = Settings(downloads_dir=tmp_path / "a" / "b")
        settings.ensure_directories()
        assert (tmp_path / "a" / "b").is_dir()
