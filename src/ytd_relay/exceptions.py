"""Custom exception hierarchy for ytd-relay.

All exceptions that cross layer boundaries must inherit from
:class:`YtdRelayError`.  Raw third-party exceptions (e.g. from yt-dlp)
must NEVER propagate beyond the infrastructure layer — they must be
caught and re-raised as a typed subclass defined here.

Hierarchy
---------
YtdRelayError
├── InvalidInputError
├── NoActiveSessionError
├── ProbeFailedError
├── ToolInvocationFailedError
│   └── OutputMissingError
├── EnvironmentError
│   └── EnvironmentCheckError
└── FfmpegNotFoundError
"""

from __future__ import annotations


class YtdRelayError(Exception):
    """Base exception for all ytd-relay errors.

    Every requester-visible error condition must map to a subclass of
    this exception so that front ends can render a clean message without
    leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Requester input --------------------------------------------------------

class InvalidInputError(YtdRelayError):
    """Raised when a submitted URL or menu selection is malformed."""


class NoActiveSessionError(YtdRelayError):
    """Raised when a selection arrives for a requester with no stored URL."""


# --- Format probing ----------------------------------------------------------

class ProbeFailedError(YtdRelayError):
    """Raised when the format listing cannot be obtained or yields nothing."""


# --- Extraction ----------------------------------------------------------------

class ToolInvocationFailedError(YtdRelayError):
    """Raised when yt-dlp fails, raises, or exceeds the job deadline."""


class OutputMissingError(ToolInvocationFailedError):
    """Raised when yt-dlp reports success but the expected file is absent."""


# --- Environment / tooling -----------------------------------------------------

class EnvironmentError(YtdRelayError):
    """Raised when a required runtime dependency is not available."""


class EnvironmentCheckError(EnvironmentError):
    """Raised when a required environment precondition is not met."""


class FfmpegNotFoundError(YtdRelayError):
    """Raised when ffmpeg or ffprobe cannot be located on the system PATH."""


def append_ytdlp_upgrade_suggestion(hint: str) -> str:
    """Append yt-dlp upgrade guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "Also try updating yt-dlp:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    pip install --upgrade yt-dlp",
        )
    )
