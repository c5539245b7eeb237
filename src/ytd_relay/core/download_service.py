"""Core download service — builds the format string and drives extraction.

This service delegates the actual download to a
:class:`~ytd_relay.core.protocols.DownloadProvider` injected at
construction time.  It is responsible for:

* Building the yt-dlp–compatible format string for a job.
* Delegating to the provider.
* Ensuring only :class:`~ytd_relay.exceptions.ToolInvocationFailedError`
  subclasses escape.

Guarantees
----------
* Pure orchestration — no I/O, no ``print()``, no filesystem access.
* No yt-dlp import.
"""

from __future__ import annotations

from pathlib import Path

from ytd_relay.core.models import Job, MediaType
from ytd_relay.core.protocols import DownloadProvider
from ytd_relay.exceptions import ToolInvocationFailedError, YtdRelayError

AUDIO_SELECTOR: str = "bestaudio"


class DownloadService:
    """Stateless service that runs one job through the provider.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`DownloadProvider` protocol.
    timeout:
        Per-job deadline in seconds, or ``None`` for unbounded.
    """

    def __init__(
        self,
        provider: DownloadProvider,
        *,
        timeout: float | None = None,
    ) -> None:
        self._provider: DownloadProvider = provider
        self._timeout: float | None = timeout

    # ------------------------------------------------------------------
    # Format string construction (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def build_format_spec(media_type: MediaType, format_selector: str) -> str:
        """Build the yt-dlp format string for a job.

        Rules
        -----
        * Audio always uses ``bestaudio``, whatever was selected.
        * Video pairs the chosen stream with ``bestaudio`` for merging,
          unless the selector already names an audio part.
        """
        if media_type is MediaType.AUDIO:
            return AUDIO_SELECTOR
        if "+" in format_selector:
            return format_selector
        return f"{format_selector}+{AUDIO_SELECTOR}"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def download(self, job: Job, output_path: Path) -> None:
        """Run *job*, writing the result to *output_path*.

        Raises
        ------
        ToolInvocationFailedError
            When the download fails for any reason.
        """
        format_spec = self.build_format_spec(job.media_type, job.format_selector)
        try:
            self._provider.download(
                job.source_url,
                format_spec,
                output_path,
                media_type=job.media_type,
                timeout=self._timeout,
            )
        except ToolInvocationFailedError:
            raise
        except YtdRelayError as exc:
            raise ToolInvocationFailedError(str(exc), hint=exc.hint) from exc
        except Exception as exc:
            raise ToolInvocationFailedError(
                f"Unexpected download error: {exc}",
            ) from exc
