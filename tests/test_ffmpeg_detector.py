"""Tests for ffmpeg/ffprobe detection (infra/ffmpeg_detector.py).

All tests mock :func:`shutil.which` — no system dependency.

Coverage:
* ``detect_ffmpeg`` / ``detect_ffprobe`` when found and missing.
* ``require_ffmpeg`` happy path and each missing-tool case.
* Platform-specific install commands (Windows / Linux / macOS).
* ``ToolStatus`` frozen dataclass.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ytd_relay.exceptions import FfmpegNotFoundError
from ytd_relay.infra.ffmpeg_detector import (
    ToolStatus,
    _platform_install_commands,
    detect_ffmpeg,
    detect_ffprobe,
    require_ffmpeg,
)


def _which_only(*present: str):
    def _which(name: str) -> str | None:
        return f"/usr/bin/{name}" if name in present else None

    return _which


# ---------------------------------------------------------------------------
# detect_ffmpeg / detect_ffprobe
# ---------------------------------------------------------------------------

class TestDetectTools:
    @patch("ytd_relay.infra.ffmpeg_detector.shutil.which")
    def test_found(self, mock_which: MagicMock) -> None:
        mock_which.return_value = "/usr/bin/ffmpeg"
        status = detect_ffmpeg()

        assert status.name == "ffmpeg"
        assert status.found is True
        assert isinstance(status.path, Path)
        assert "found at" in status.version_hint
        assert status.install_commands == ()

    @patch("ytd_relay.infra.ffmpeg_detector.shutil.which")
    def test_not_found(self, mock_which: MagicMock) -> None:
        mock_which.return_value = None
        status = detect_ffmpeg()

        assert status.found is False
        assert status.path is None
        assert status.version_hint == "not found"
        assert len(status.install_commands) > 0

    @patch("ytd_relay.infra.ffmpeg_detector.shutil.which")
    def test_ffprobe_is_looked_up_by_name(self, mock_which: MagicMock) -> None:
        mock_which.return_value = None
        status = detect_ffprobe()

        mock_which.assert_called_once_with("ffprobe")
        assert status.name == "ffprobe"
        assert status.found is False


# ---------------------------------------------------------------------------
# require_ffmpeg
# ---------------------------------------------------------------------------

class TestRequireFfmpeg:
    @patch("ytd_relay.infra.ffmpeg_detector.shutil.which")
    def test_found_returns_both_paths(self, mock_which: MagicMock) -> None:
        mock_which.side_effect = _which_only("ffmpeg", "ffprobe")
        paths = require_ffmpeg()
        assert set(paths) == {"ffmpeg", "ffprobe"}
        assert all(isinstance(p, Path) for p in paths.values())

    @patch("ytd_relay.infra.ffmpeg_detector.shutil.which")
    def test_missing_raises(self, mock_which: MagicMock) -> None:
        mock_which.return_value = None
        with pytest.raises(FfmpegNotFoundError, match="not installed"):
            require_ffmpeg()

    @patch("ytd_relay.infra.ffmpeg_detector.shutil.which")
    def test_missing_ffprobe_only_is_named(self, mock_which: MagicMock) -> None:
        mock_which.side_effect = _which_only("ffmpeg")
        with pytest.raises(FfmpegNotFoundError) as exc_info:
            require_ffmpeg()
        message = str(exc_info.value)
        assert message.startswith("ffprobe ")
        assert "ffmpeg," not in message

    @patch("ytd_relay.infra.ffmpeg_detector.shutil.which")
    def test_missing_hint_contains_install_command(self, mock_which: MagicMock) -> None:
        mock_which.return_value = None
        with pytest.raises(FfmpegNotFoundError) as exc_info:
            require_ffmpeg()
        assert exc_info.value.hint is not None
        assert "Install ffmpeg" in exc_info.value.hint


# ---------------------------------------------------------------------------
# Platform install commands
# ---------------------------------------------------------------------------

class TestPlatformInstallCommands:
    @patch("ytd_relay.infra.ffmpeg_detector.platform.system", return_value="Windows")
    def test_windows_commands(self, _mock_sys: MagicMock) -> None:
        cmds = _platform_install_commands()
        assert "winget install Gyan.FFmpeg" in cmds
        assert "choco install ffmpeg" in cmds

    @patch("ytd_relay.infra.ffmpeg_detector.platform.system", return_value="Linux")
    def test_linux_commands(self, _mock_sys: MagicMock) -> None:
        cmds = _platform_install_commands()
        assert any("apt" in c for c in cmds)
        assert any("dnf" in c for c in cmds)

    @patch("ytd_relay.infra.ffmpeg_detector.platform.system", return_value="Darwin")
    def test_darwin_commands(self, _mock_sys: MagicMock) -> None:
        cmds = _platform_install_commands()
        assert cmds == ("brew install ffmpeg",)

    @patch("ytd_relay.infra.ffmpeg_detector.platform.system", return_value="Plan9")
    def test_unknown_platform_points_to_website(self, _mock_sys: MagicMock) -> None:
        cmds = _platform_install_commands()
        assert "ffmpeg.org" in cmds[0]


# ---------------------------------------------------------------------------
# ToolStatus dataclass
# ---------------------------------------------------------------------------

class TestToolStatus:
    def test_frozen(self) -> None:
        status = ToolStatus(
            name="ffmpeg",
            found=True,
            path=Path("/usr/bin/ffmpeg"),
            version_hint="found",
            install_commands=(),
        )
        with pytest.raises(AttributeError):
            status.found = False  # type: ignore[misc]

    def test_fields(self) -> None:
        status = ToolStatus(
            name="ffprobe",
            found=False,
            path=None,
            version_hint="not found",
            install_commands=("cmd1", "cmd2"),
        )
        assert status.name == "ffprobe"
        assert status.path is None
        assert status.install_commands == ("cmd1", "cmd2")
