"""Domain models for ytd-relay.

Value objects are **frozen** dataclasses with no behaviour beyond data
access and trivial derivations.  :class:`Session` is the one mutable
record; it is owned exclusively by the session store.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path


# ---------------------------------------------------------------------------
# Media type
# ---------------------------------------------------------------------------

class MediaType(str, enum.Enum):
    """Delivery format chosen by the requester."""

    AUDIO = "audio"
    VIDEO = "video"

    @property
    def extension(self) -> str:
        """Container extension of the produced file."""
        return "mp3" if self is MediaType.AUDIO else "mp4"


# ---------------------------------------------------------------------------
# Requester / session
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Requester:
    """Identity that owns a request and receives its notifications."""

    id: str
    """Opaque, stable requester identifier."""

    destination: str = ""
    """Opaque reply channel understood by the front end."""


@dataclass(slots=True)
class Session:
    """Transient per-requester state between URL submission and enqueue."""

    source_url: str
    pending_type: MediaType | None = None


# ---------------------------------------------------------------------------
# Format choices
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FormatChoice:
    """One selectable video quality derived from the probe listing."""

    format_selector: str
    """yt-dlp format id for the video stream."""

    height: int
    """Vertical resolution in pixels."""

    fps: int
    """Frame-rate class: 60 or 30."""

    ext: str = ""
    """Container extension reported by the listing, if any."""

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``"1080p 60fps"``."""
        return f"{self.height}p {self.fps}fps"


@dataclass(frozen=True, slots=True)
class FormatCollection:
    """Immutable, ordered collection of :class:`FormatChoice` entries."""

    choices: tuple[FormatChoice, ...]

    def __len__(self) -> int:
        return len(self.choices)

    def __bool__(self) -> bool:
        return len(self.choices) > 0

    def labels(self) -> list[str]:
        return [choice.label for choice in self.choices]

    def as_options(self) -> list[tuple[str, str]]:
        """Return ``(label, format_selector)`` pairs for menu rendering."""
        return [(choice.label, choice.format_selector) for choice in self.choices]


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Job:
    """A fully specified download task, immutable once enqueued."""

    requester: Requester
    source_url: str
    format_selector: str
    media_type: MediaType
    enqueued_at: int
    """Millisecond epoch, unique per job within one process."""

    @property
    def filename(self) -> str:
        """Deterministic output name: ``{media_type}_{enqueued_at}.{ext}``."""
        return f"{self.media_type.value}_{self.enqueued_at}.{self.media_type.extension}"


@dataclass(frozen=True, slots=True)
class ProducedFile:
    """A file written into the public downloads directory."""

    path: Path
    media_type: MediaType | None
    created_at: float
    """Modification time, epoch seconds."""

    size_bytes: int

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class JobOutcome:
    """Terminal result of one executed job."""

    job: Job
    succeeded: bool
    produced: ProducedFile | None = None
    link: str | None = None
    error: str | None = None
