"""yt-dlp backed implementation of :class:`~ytd_relay.core.protocols.DownloadProvider`.

This module is the **only** place in the codebase that invokes the
yt-dlp download machinery.  All yt-dlp exceptions are caught here and
re-raised as :class:`~ytd_relay.exceptions.ToolInvocationFailedError`.

Intermediate files go to a staging directory next to the output, so
only finished files ever appear under their public name.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ytd_relay.core.models import MediaType
from ytd_relay.exceptions import EnvironmentError, ToolInvocationFailedError
from ytd_relay.infra.download_store import STAGING_DIRNAME

DEFAULT_AUDIO_BITRATE_KBPS: int = 192
# Upper bound on a single socket read while a job deadline is set.
MAX_SOCKET_TIMEOUT_SECONDS: float = 30.0


class JobDeadlineExceeded(Exception):
    """Raised from inside a yt-dlp hook to abort an overdue download."""


class DeadlineHook:
    """yt-dlp progress/post-processor hook enforcing a wall-clock deadline.

    yt-dlp calls its hooks from the downloading thread, so raising here
    stops the transfer itself instead of abandoning a running thread.
    Hooks only fire on progress, so a stalled connection is bounded by
    the socket timeout set alongside it rather than by the deadline.
    """

    def __init__(
        self,
        timeout: float | None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._deadline: float | None = None if timeout is None else clock() + timeout
        self.timeout: float | None = timeout

    @property
    def expired(self) -> bool:
        return self._deadline is not None and self._clock() > self._deadline

    def __call__(self, _d: dict[str, Any]) -> None:
        if self.expired:
            raise JobDeadlineExceeded(f"download exceeded {self.timeout:g}s")


class YtDlpDownloadProvider:
    """Concrete :class:`DownloadProvider` backed by the yt-dlp Python API.

    Parameters
    ----------
    audio_bitrate_kbps:
        Bitrate of the mp3 produced for audio jobs.
    """

    def __init__(self, *, audio_bitrate_kbps: int = DEFAULT_AUDIO_BITRATE_KBPS) -> None:
        self._audio_bitrate_kbps = audio_bitrate_kbps

    def _build_opts(
        self,
        format_spec: str,
        output_path: Path,
        media_type: MediaType,
        hook: DeadlineHook,
    ) -> dict[str, Any]:
        """Return yt-dlp options for writing *output_path*.

        The output template drops the extension; yt-dlp appends the final
        one after merging (mp4) or audio extraction (mp3).
        """
        stem = output_path.stem.replace("%", "%%")
        opts: dict[str, Any] = {
            "format": format_spec,
            "outtmpl": f"{stem}.%(ext)s",
            "paths": {
                "home": str(output_path.parent),
                "temp": str(output_path.parent / STAGING_DIRNAME),
            },
            "quiet": True,
            "no_warnings": True,
            "no_color": True,
            "noplaylist": True,
            "overwrites": True,
            "progress_hooks": [hook],
            "postprocessor_hooks": [hook],
        }
        if hook.timeout is not None:
            opts["socket_timeout"] = min(hook.timeout, MAX_SOCKET_TIMEOUT_SECONDS)
        if media_type is MediaType.AUDIO:
            opts["postprocessors"] = [
                {
                    "key": "FFmpegExtractAudio",
                    "preferredcodec": "mp3",
                    "preferredquality": str(self._audio_bitrate_kbps),
                }
            ]
        else:
            opts["merge_output_format"] = "mp4"
        return opts

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def download(
        self,
        url: str,
        format_spec: str,
        output_path: Path,
        *,
        media_type: MediaType,
        timeout: float | None = None,
    ) -> None:
        """Download *url* using *format_spec* into *output_path*.

        Raises
        ------
        EnvironmentError
            When yt-dlp is not installed.
        ToolInvocationFailedError
            For any yt-dlp error, or when *timeout* elapses.
        """
        hook = DeadlineHook(timeout)
        opts = self._build_opts(format_spec, output_path, media_type, hook)

        try:
            import yt_dlp
            import yt_dlp.utils
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "yt-dlp is not installed. Install with: pip install yt-dlp",
            ) from exc

        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                ydl.download([url])
        except Exception as exc:
            if hook.expired:
                raise ToolInvocationFailedError(
                    f"Download timed out after {timeout:g}s",
                    hint="Raise YTD_RELAY_JOB_TIMEOUT_SECONDS for long media.",
                ) from exc
            if isinstance(exc, yt_dlp.utils.DownloadError):
                raise ToolInvocationFailedError(
                    str(exc),
                    hint="Check the URL, your network, or try a different quality.",
                ) from exc
            raise ToolInvocationFailedError(
                f"Unexpected yt-dlp download error: {exc}",
            ) from exc
