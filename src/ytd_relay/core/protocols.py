"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters and front ends
must satisfy.  Core code depends ONLY on these protocols — never on
concrete implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from ytd_relay.core.models import Job, MediaType, ProducedFile, Requester


class ProbeProvider(Protocol):
    """Contract for format-listing backends.

    Any object that implements :meth:`list_formats` with the correct
    signature satisfies this protocol structurally (no explicit
    inheritance required).
    """

    def list_formats(self, url: str) -> str:
        """Return the backend's text format table for *url*.

        Each relevant line starts with a format identifier and carries a
        resolution marker such as ``1080p`` or ``1920x1080``.

        Raises
        ------
        ProbeFailedError
            When the backend fails or returns no listing.
        """
        ...  # pragma: no cover


class DownloadProvider(Protocol):
    """Contract for extraction backends.

    Implementations wrap the actual download mechanics (e.g. yt-dlp)
    and must map all backend-specific exceptions to
    :class:`~ytd_relay.exceptions.YtdRelayError` subclasses.
    """

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

        Parameters
        ----------
        url:
            The media page URL.
        format_spec:
            A yt-dlp compatible format string
            (e.g. ``"bestaudio"`` or ``"137+bestaudio"``).
        output_path:
            Final file path, including the ``mp3``/``mp4`` extension.
        media_type:
            Audio jobs are transcoded to mp3; video jobs merged to mp4.
        timeout:
            Seconds after which the running download is aborted.
            ``None`` leaves it unbounded.

        Raises
        ------
        ToolInvocationFailedError
            When the download fails or times out.
        """
        ...  # pragma: no cover


class FileStore(Protocol):
    """Contract for the public downloads directory."""

    def path_for(self, job: Job) -> Path:
        """Return the output path for *job* inside the public directory."""
        ...  # pragma: no cover

    def describe(self, path: Path, media_type: MediaType) -> ProducedFile:
        """Stat *path*; raise ``OutputMissingError`` if it does not exist."""
        ...  # pragma: no cover

    def public_url(self, filename: str) -> str:
        """Return the retrieval link for *filename*."""
        ...  # pragma: no cover

    def sweep(self, now: float | None = None) -> list[Path]:
        """Delete expired files and return the removed paths."""
        ...  # pragma: no cover


class Notifier(Protocol):
    """Outbound half of the front-end contract."""

    async def notify(self, requester: Requester, message: str) -> None:
        """Deliver a status message to *requester*."""
        ...  # pragma: no cover

    async def present_choices(
        self,
        requester: Requester,
        options: Sequence[tuple[str, str]],
        selection_id: str,
    ) -> None:
        """Offer ``(label, value)`` *options* under *selection_id*."""
        ...  # pragma: no cover
