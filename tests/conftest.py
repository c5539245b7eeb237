"""Shared pytest fixtures and configuration for the ytd-relay test suite.

Guidelines
----------
* No internet access in any test.
* yt-dlp must be mocked at the infra boundary.
* Core tests use in-memory fakes for every protocol.
* Filesystem tests stay under ``tmp_path``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest

from ytd_relay.core.download_service import DownloadService
from ytd_relay.core.job_queue import JobQueue
from ytd_relay.core.models import MediaType, Requester
from ytd_relay.core.session_store import SessionStore
from ytd_relay.exceptions import ToolInvocationFailedError
from ytd_relay.infra.download_store import DownloadStore

BASE_URL = "https://relay.example.com"


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo the root handlers ``configure_logging`` installs via ``main()``."""
    root = logging.getLogger()
    before = root.handlers[:]
    level = root.level
    asyncio_level = logging.getLogger("asyncio").level
    yield
    for handler in root.handlers[:]:
        if handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)
    logging.getLogger("asyncio").setLevel(asyncio_level)


class RecordingNotifier:
    """Notifier fake that records every message and menu."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []
        self.menus: list[tuple[str, list[tuple[str, str]], str]] = []

    async def notify(self, requester: Requester, message: str) -> None:
        self.messages.append((requester.id, message))

    async def present_choices(
        self,
        requester: Requester,
        options: Sequence[tuple[str, str]],
        selection_id: str,
    ) -> None:
        self.menus.append((requester.id, list(options), selection_id))

    def texts(self) -> list[str]:
        return [message for _, message in self.messages]


class FakeDownloadProvider:
    """DownloadProvider fake that writes a file instead of calling yt-dlp.

    ``fail_urls`` make the call raise; ``skip_write_urls`` succeed without
    writing anything.  ``gate``, when set, blocks each call until released.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, Path, MediaType]] = []
        self.fail_urls: set[str] = set()
        self.skip_write_urls: set[str] = set()
        self.gate: threading.Event | None = None
        self.active: int = 0
        self.max_active: int = 0
        self._lock = threading.Lock()

    def download(
        self,
        url: str,
        format_spec: str,
        output_path: Path,
        *,
        media_type: MediaType,
        timeout: float | None = None,
    ) -> None:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.calls.append((url, format_spec, output_path, media_type))
        try:
            if self.gate is not None:
                self.gate.wait(timeout=5)
            if url in self.fail_urls:
                raise ToolInvocationFailedError(f"yt-dlp exited non-zero for {url}")
            if url not in self.skip_write_urls:
                output_path.write_bytes(b"x" * 2048)
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture()
def requester() -> Requester:
    return Requester(id="user-1", destination="channel-1")


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def sessions() -> SessionStore:
    return SessionStore()


@pytest.fixture()
def provider() -> FakeDownloadProvider:
    return FakeDownloadProvider()


@pytest.fixture()
def store(tmp_path: Path) -> DownloadStore:
    return DownloadStore(tmp_path / "downloads", BASE_URL)


@pytest.fixture()
def make_queue(
    provider: FakeDownloadProvider,
    store: DownloadStore,
    sessions: SessionStore,
    notifier: RecordingNotifier,
) -> Callable[..., JobQueue]:
    """Factory so tests can build the queue inside a running loop."""

    def _make(**kwargs: object) -> JobQueue:
        return JobQueue(
            DownloadService(provider),
            store,
            sessions,
            notifier,
            **kwargs,  # type: ignore[arg-type]
        )

    return _make
