"""yt-dlp backed implementation of :class:`~ytd_relay.core.protocols.ProbeProvider`.

All yt-dlp exceptions are caught here and re-raised as
:class:`~ytd_relay.exceptions.ProbeFailedError` — nothing raw escapes the
infrastructure boundary.
"""

from __future__ import annotations

from typing import Any

from ytd_relay.exceptions import EnvironmentError, ProbeFailedError


class YtDlpProbeProvider:
    """Concrete :class:`ProbeProvider` backed by the yt-dlp Python API.

    Usage::

        provider = YtDlpProbeProvider()
        table = provider.list_formats("https://www.youtube.com/watch?v=...")

    The returned text is yt-dlp's own format table, the same listing
    ``yt-dlp -F`` prints.
    """

    # Substrings in yt-dlp error messages that indicate the media itself
    # is unavailable (as opposed to a transient or extraction error).
    _UNAVAILABLE_SIGNALS: tuple[str, ...] = (
        "unavailable",
        "private video",
        "removed",
        "not available",
        "account terminated",
        "sign in to confirm your age",
    )

    @staticmethod
    def _build_opts() -> dict[str, Any]:
        """Return yt-dlp options suitable for metadata-only extraction."""
        return {
            "quiet": True,
            "no_warnings": True,
            "no_color": True,
            "noplaylist": True,
            # Do not write any files to disk.
            "skip_download": True,
        }

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def list_formats(self, url: str) -> str:
        """Return the rendered format table for *url* without downloading.

        Raises
        ------
        EnvironmentError
            When yt-dlp is not installed.
        ProbeFailedError
            For every extraction failure or an empty listing.
        """
        opts = self._build_opts()

        try:
            import yt_dlp
            import yt_dlp.utils
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "yt-dlp is not installed. Install with: pip install yt-dlp",
            ) from exc

        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                info: Any = ydl.extract_info(url, download=False)
                if not isinstance(info, dict):
                    raise ProbeFailedError(
                        "yt-dlp returned no metadata for the given URL.",
                        hint="The URL may not point to downloadable media.",
                    )
                table: Any = ydl.render_formats_table(info)
        except ProbeFailedError:
            raise
        except yt_dlp.utils.DownloadError as exc:
            self._raise_mapped(exc)
        except Exception as exc:
            raise ProbeFailedError(
                f"Unexpected yt-dlp error: {exc}",
            ) from exc

        if not table:
            raise ProbeFailedError(
                "yt-dlp listed no formats for the given URL.",
            )
        return str(table)

    # ------------------------------------------------------------------
    # Exception mapping
    # ------------------------------------------------------------------

    @classmethod
    def _raise_mapped(cls, exc: Exception) -> None:
        """Translate a yt-dlp ``DownloadError`` into :class:`ProbeFailedError`.

        Always raises.
        """
        msg_lower = str(exc).lower()
        if any(signal in msg_lower for signal in cls._UNAVAILABLE_SIGNALS):
            raise ProbeFailedError(
                str(exc),
                hint="The media may be private, removed, or geo-restricted.",
            ) from exc
        raise ProbeFailedError(str(exc)) from exc
