"""Infrastructure: ffmpeg / ffprobe detection and platform guidance.

yt-dlp needs ffmpeg to merge video+audio into mp4 and both ffmpeg and
ffprobe to extract mp3 audio.  This module locates those binaries on
PATH and provides platform-specific installation guidance when they are
missing.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No permanent PATH modification.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from ytd_relay.exceptions import FfmpegNotFoundError

REQUIRED_TOOLS: tuple[str, ...] = ("ffmpeg", "ffprobe")


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ToolStatus:
    """Result of a PATH probe for one binary.

    Attributes
    ----------
    name : str
        Binary name, e.g. ``"ffprobe"``.
    found : bool
        Whether the binary was located on PATH.
    path : Path | None
        Absolute path to the binary, or ``None``.
    version_hint : str
        Human-readable status string (e.g. ``"found at …"`` or ``"not found"``).
    install_commands : tuple[str, ...]
        Suggested shell commands for installing ffmpeg (which ships
        ffprobe) on the current platform.  Empty when present.
    """

    name: str
    found: bool
    path: Path | None
    version_hint: str
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_tool(name: str) -> ToolStatus:
    """Probe PATH for *name*; never raises."""
    result = shutil.which(name)

    if result is not None:
        resolved = Path(result).resolve()
        return ToolStatus(
            name=name,
            found=True,
            path=resolved,
            version_hint=f"found at {resolved}",
            install_commands=(),
        )

    return ToolStatus(
        name=name,
        found=False,
        path=None,
        version_hint="not found",
        install_commands=_platform_install_commands(),
    )


def detect_ffmpeg() -> ToolStatus:
    return detect_tool("ffmpeg")


def detect_ffprobe() -> ToolStatus:
    return detect_tool("ffprobe")


def require_ffmpeg() -> dict[str, Path]:
    """Locate ffmpeg and ffprobe or raise :class:`FfmpegNotFoundError`.

    Returns a mapping of tool name to resolved path.
    """
    statuses = [detect_tool(name) for name in REQUIRED_TOOLS]
    missing = [status for status in statuses if not status.found or status.path is None]
    if missing:
        names = ", ".join(status.name for status in missing)
        hint_lines: list[str] = []
        commands = missing[0].install_commands
        if commands:
            hint_lines.append("Install ffmpeg using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in commands)
        raise FfmpegNotFoundError(
            f"{names} not installed or not on PATH.",
            hint="\n".join(hint_lines) if hint_lines else None,
        )
    return {status.name: status.path for status in statuses if status.path is not None}


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def _platform_install_commands() -> tuple[str, ...]:
    """Return install commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "windows":
        return (
            "winget install Gyan.FFmpeg",
            "choco install ffmpeg",
        )
    if system == "linux":
        return (
            "sudo apt install ffmpeg",
            "sudo dnf install ffmpeg",
            "sudo pacman -S ffmpeg",
        )
    if system == "darwin":
        return ("brew install ffmpeg",)
    return ("Please install ffmpeg from https://ffmpeg.org/download.html",)
