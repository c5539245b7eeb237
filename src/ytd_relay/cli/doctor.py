"""``ytd-relay doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment can probe, download, transcode, and
publish files.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No business logic resides
here; it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import os
import platform
import sys
from pathlib import Path

from ytd_relay.cli import exit_codes
from ytd_relay.cli.console import console
from ytd_relay.infra.ffmpeg_detector import ToolStatus, detect_ffmpeg, detect_ffprobe
from ytd_relay.version import __version__

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _ytdlp_version_check() -> Check:
    """Return (label, value, status) for the yt-dlp version row."""
    try:
        from yt_dlp.version import __version__ as ydl_ver

        return "yt-dlp", ydl_ver, "[green]OK[/green]"
    except ImportError:
        pass

    # yt-dlp installed but version submodule unavailable.
    try:
        import yt_dlp  # noqa: F401

        return "yt-dlp", "unknown", "[green]OK[/green]"
    except ImportError:
        return "yt-dlp", "NOT INSTALLED", "[red]FAIL[/red]"


def _tool_row(status: ToolStatus) -> Check:
    if status.found:
        path_str = str(status.path) if status.path else "found"
        return status.name, path_str, "[green]OK[/green]"
    # Probing still works without ffmpeg; only transcoding/merging fails.
    return status.name, "not found", "[yellow]WARN[/yellow]"


def _ffmpeg_check() -> Check:
    """Return (label, value, status) for the ffmpeg row."""
    return _tool_row(detect_ffmpeg())


def _ffprobe_check() -> Check:
    """Return (label, value, status) for the ffprobe row."""
    return _tool_row(detect_ffprobe())


def _downloads_dir_check(downloads_dir: Path) -> Check:
    """Return (label, value, status) for the downloads directory row."""
    target = downloads_dir
    while not target.exists() and target != target.parent:
        target = target.parent
    writable = target.is_dir() and os.access(target, os.W_OK)
    status = "[green]OK[/green]" if writable else "[red]FAIL (not writable)[/red]"
    return "downloads", str(downloads_dir), status


def _os_check() -> Check:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, "[green]OK[/green]"


def _ytdrelay_version_check() -> Check:
    """Return (label, value, status) for the ytd-relay version row."""
    return "ytd-relay", __version__, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\nytd-relay doctor", file=sys.stderr)
    print("=" * 64, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<40} {'Status':<8}", file=sys.stderr)
    print("-" * 64, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<12} {value:<40} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(downloads_dir: Path = Path("./downloads")) -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = [
        _ytdrelay_version_check(),
        _python_version_check(),
        _ytdlp_version_check(),
        _ffmpeg_check(),
        _ffprobe_check(),
        _downloads_dir_check(downloads_dir),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    rich_available = True
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        rich_available = False

    if rich_available:
        table = Table(
            title="ytd-relay doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, value, status)

        console.print()
        console.print(table)
        console.print()
    else:
        _print_plain_doctor_table(checks)

    ffmpeg_status = detect_ffmpeg()
    if not ffmpeg_status.found and ffmpeg_status.install_commands:
        console.print("ffmpeg is not installed; audio and merged video jobs will fail.")
        console.print("Install using one of the following commands:\n")
        for cmd in ffmpeg_status.install_commands:
            console.print(f"  {cmd}")
        console.print()

    if has_failure:
        console.print("Some checks failed.")
        return exit_codes.GENERAL_ERROR

    console.print("All checks passed.")
    return exit_codes.SUCCESS
