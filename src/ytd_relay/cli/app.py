"""CLI application entry point and command routing for ytd-relay.

This module is the **sole process-level error boundary**.  It catches
:class:`~ytd_relay.exceptions.YtdRelayError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via
Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core
  and infrastructure layers.
* The console front end plays the requester role: it submits URLs,
  answers the menus the download flow offers, and prints the links.
* This module is the only place that translates between the domain
  world and the OS process exit code.
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ytd_relay.cli import exit_codes
from ytd_relay.cli.console import console, render_error
from ytd_relay.exceptions import EnvironmentCheckError, YtdRelayError
from ytd_relay.version import __version__

if TYPE_CHECKING:
    from ytd_relay.cli.console_notifier import ConsoleNotifier
    from ytd_relay.config import Settings
    from ytd_relay.core.download_flow import DownloadFlow
    from ytd_relay.core.models import Requester

_COMMANDS: tuple[str, ...] = ("doctor", "sweep")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Supported invocations:
    * ``ytd-relay <url> [<url> ...]`` — queue downloads (interactive)
    * ``ytd-relay doctor``            — environment diagnostics
    * ``ytd-relay sweep``             — delete expired downloads once
    * ``ytd-relay --version``
    """
    parser = argparse.ArgumentParser(
        prog="ytd-relay",
        description="Serialized media downloader with expiring links.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--downloads-dir",
        type=Path,
        default=None,
        help="Directory for produced files (overrides YTD_RELAY_DOWNLOADS_DIR).",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Public base address for links (overrides YTD_RELAY_BASE_URL).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "targets",
        nargs="*",
        help="Media URLs to download, or 'doctor' / 'sweep'.",
    )
    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    """Read settings from the environment and apply CLI overrides."""
    from pydantic import ValidationError

    from ytd_relay.config import load_settings

    try:
        settings = load_settings()
    except ValidationError as exc:
        raise EnvironmentCheckError(
            "Invalid configuration.",
            hint=str(exc),
        ) from exc

    overrides: dict[str, object] = {}
    if args.downloads_dir is not None:
        overrides["downloads_dir"] = args.downloads_dir
    if args.base_url is not None:
        overrides["base_url"] = args.base_url.rstrip("/")
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return settings.model_copy(update=overrides) if overrides else settings


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_download(urls: list[str], settings: Settings) -> int:
    """Dispatch interactive downloads for *urls*.

    Flow:
    1. Check ffmpeg/ffprobe, build infra providers + core services.
    2. For every URL: submit, pick a type, pick a quality for video.
    3. Wait for the single-flight queue to drain; print the links.
    """
    from ytd_relay.infra.ffmpeg_detector import require_ffmpeg

    require_ffmpeg()
    return asyncio.run(_run_downloads(urls, settings))


async def _run_downloads(urls: list[str], settings: Settings) -> int:
    from ytd_relay.cli.console_notifier import ConsoleNotifier
    from ytd_relay.core.download_flow import DownloadFlow
    from ytd_relay.core.download_service import DownloadService
    from ytd_relay.core.expiry_sweeper import ExpirySweeper
    from ytd_relay.core.format_prober import FormatProber
    from ytd_relay.core.job_queue import JobQueue
    from ytd_relay.core.models import Requester
    from ytd_relay.core.session_store import SessionStore
    from ytd_relay.infra.download_store import DownloadStore
    from ytd_relay.infra.ytdlp_download_provider import YtDlpDownloadProvider
    from ytd_relay.infra.ytdlp_probe_provider import YtDlpProbeProvider

    settings.ensure_directories()
    store = DownloadStore(
        settings.downloads_dir,
        settings.base_url,
        expiry_seconds=settings.file_expiry_seconds,
    )
    sessions = SessionStore()
    notifier = ConsoleNotifier()
    prober = FormatProber(YtDlpProbeProvider(), max_choices=settings.max_format_choices)
    downloader = DownloadService(
        YtDlpDownloadProvider(audio_bitrate_kbps=settings.audio_bitrate_kbps),
        timeout=settings.job_timeout_seconds,
    )
    queue = JobQueue(
        downloader,
        store,
        sessions,
        notifier,
        expiry_hours=settings.file_expiry_hours,
    )
    flow = DownloadFlow(sessions, prober, queue, notifier)
    sweeper = ExpirySweeper(
        store,
        interval=settings.sweep_interval_seconds,
        sweep_on_boot=settings.sweep_on_boot,
    )

    requester = Requester(id=_local_user(), destination="console")
    rejected = 0

    sweeper.start()
    try:
        for url in urls:
            try:
                await _request_one(flow, notifier, requester, url)
            except YtdRelayError as exc:
                rejected += 1
                render_error(exc)
        await queue.wait_idle()
    finally:
        await sweeper.stop()
        await queue.close()

    failed = [outcome for outcome in queue.outcomes if not outcome.succeeded]
    if rejected or failed:
        console.print(
            f"\n[bold red]{rejected} request(s) rejected, "
            f"{len(failed)} job(s) failed.[/bold red]"
        )
        return exit_codes.GENERAL_ERROR

    console.print("\n[bold green]All downloads complete.[/bold green]")
    return exit_codes.SUCCESS


async def _request_one(
    flow: DownloadFlow,
    notifier: ConsoleNotifier,
    requester: Requester,
    url: str,
) -> None:
    """Walk one URL through the type and quality menus."""
    from ytd_relay.cli.choice_prompt import prompt_choice
    from ytd_relay.core.download_flow import SELECT_QUALITY, SELECT_TYPE
    from ytd_relay.core.models import FormatCollection

    console.print(f"\n[bold]Submitting…[/bold]  {url}")
    await flow.submit_url(requester, url)

    media_type = await prompt_choice(
        "Select download type:", notifier.take_offer(requester, SELECT_TYPE),
    )
    result = await flow.choose_type(requester, media_type)
    if not isinstance(result, FormatCollection):
        return

    selector = await prompt_choice(
        "Select video quality:", notifier.take_offer(requester, SELECT_QUALITY),
    )
    await flow.choose_quality(requester, selector)


def _local_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "local"


def _handle_sweep(settings: Settings) -> int:
    """Run one expiry sweep, then list the files still being served."""
    from ytd_relay.infra.download_store import DownloadStore
    from ytd_relay.utils.units import format_filesize, format_hours

    store = DownloadStore(
        settings.downloads_dir,
        settings.base_url,
        expiry_seconds=settings.file_expiry_seconds,
    )
    removed = store.sweep()
    console.print(f"Removed {len(removed)} expired file(s) from {settings.downloads_dir}")

    remaining = store.list_files()
    if remaining:
        console.print(f"{len(remaining)} file(s) still served:")
    for produced in remaining:
        left = format_hours(round(store.seconds_left(produced) / 60) / 60)
        console.print(
            f"  {produced.filename}  {format_filesize(produced.size_bytes)}, "
            f"expires in {left}",
        )
    return exit_codes.SUCCESS


def _handle_doctor(settings: Settings) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from ytd_relay.cli.doctor import run_doctor

    return run_doctor(settings.downloads_dir)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the ytd-relay CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    targets: list[str] = args.targets
    if not targets:
        parser.print_help()
        return exit_codes.SUCCESS

    settings = _load_settings(args)

    from ytd_relay.cli.logging_setup import configure_logging

    configure_logging(settings.log_level)

    command = targets[0].lower()
    if command in _COMMANDS:
        if len(targets) > 1:
            parser.error(f"'{command}' takes no further arguments")
        if command == "doctor":
            return _handle_doctor(settings)
        return _handle_sweep(settings)

    return _handle_download(targets, settings)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except YtdRelayError as exc:
        render_error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
