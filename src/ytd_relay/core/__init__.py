"""Core / service layer — business logic and job orchestration.

Rules
-----
* No ``print()`` calls.
* No direct filesystem or network I/O; adapters are injected.
* No imports from ``cli`` or ``infra``.
* Queue and session state are mutated on the event-loop thread only.
"""

from ytd_relay.core.download_flow import DownloadFlow
from ytd_relay.core.download_service import DownloadService
from ytd_relay.core.expiry_sweeper import ExpirySweeper
from ytd_relay.core.format_prober import FormatProber
from ytd_relay.core.job_queue import JobQueue
from ytd_relay.core.models import (
    FormatChoice,
    FormatCollection,
    Job,
    JobOutcome,
    MediaType,
    ProducedFile,
    Requester,
    Session,
)
from ytd_relay.core.protocols import DownloadProvider, FileStore, Notifier, ProbeProvider
from ytd_relay.core.session_store import SessionStore

__all__: list[str] = [
    "DownloadFlow",
    "DownloadProvider",
    "DownloadService",
    "ExpirySweeper",
    "FileStore",
    "FormatChoice",
    "FormatCollection",
    "FormatProber",
    "Job",
    "JobOutcome",
    "JobQueue",
    "MediaType",
    "Notifier",
    "ProbeProvider",
    "ProducedFile",
    "Requester",
    "Session",
    "SessionStore",
]
