"""Infrastructure layer — external system integration.

This layer wraps all interaction with yt-dlp, the operating system,
ffmpeg, and the public downloads directory.  Every raw third-party
exception must be caught here and re-raised as a
:class:`~ytd_relay.exceptions.YtdRelayError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from ytd_relay.infra.download_store import DownloadStore
from ytd_relay.infra.ffmpeg_detector import (
    ToolStatus,
    detect_ffmpeg,
    detect_ffprobe,
    detect_tool,
    require_ffmpeg,
)
from ytd_relay.infra.ytdlp_download_provider import YtDlpDownloadProvider
from ytd_relay.infra.ytdlp_probe_provider import YtDlpProbeProvider

__all__: list[str] = [
    "DownloadStore",
    "ToolStatus",
    "YtDlpDownloadProvider",
    "YtDlpProbeProvider",
    "detect_ffmpeg",
    "detect_ffprobe",
    "detect_tool",
    "require_ffmpeg",
]
