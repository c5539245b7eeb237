"""Single-flight FIFO download queue.

Jobs are appended by :meth:`JobQueue.enqueue` and drained strictly in
arrival order, one at a time.  All state lives on the event-loop thread;
the blocking yt-dlp call is the only thing pushed to a worker thread, so
no lock is needed around ``busy`` or the pending deque.

Failures are isolated per job: whatever happens while a job runs, the
requester is told, ``busy`` is cleared, and the next job starts.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable

from ytd_relay.core.download_service import DownloadService
from ytd_relay.core.models import Job, JobOutcome, MediaType, ProducedFile, Requester
from ytd_relay.core.protocols import FileStore, Notifier
from ytd_relay.core.session_store import SessionStore
from ytd_relay.exceptions import ToolInvocationFailedError
from ytd_relay.utils.units import format_filesize, format_hours

logger = logging.getLogger(__name__)


class JobQueue:
    """Ordered pending jobs plus a ``busy`` flag guarding execution.

    Parameters
    ----------
    downloader:
        Runs a job through the extraction backend.
    store:
        Allocates output paths, verifies results, and builds links.
    sessions:
        Session store cleared once a job reaches its terminal outcome.
    notifier:
        Outbound channel to the requester.
    expiry_hours:
        Only used to tell the requester how long the link stays valid.
    clock:
        Returns epoch seconds; injectable for tests.
    history_size:
        Number of finished :class:`JobOutcome` records kept.
    """

    def __init__(
        self,
        downloader: DownloadService,
        store: FileStore,
        sessions: SessionStore,
        notifier: Notifier,
        *,
        expiry_hours: float = 4.0,
        clock: Callable[[], float] = time.time,
        history_size: int = 100,
    ) -> None:
        self._downloader = downloader
        self._store = store
        self._sessions = sessions
        self._notifier = notifier
        self._expiry_hours = expiry_hours
        self._clock = clock

        self._pending: deque[Job] = deque()
        self._busy: bool = False
        self._active: Job | None = None
        self._task: asyncio.Task[None] | None = None
        self._last_stamp: int = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._outcomes: deque[JobOutcome] = deque(maxlen=history_size)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def active(self) -> Job | None:
        """The job currently executing, if any."""
        return self._active

    @property
    def pending(self) -> int:
        """Number of jobs waiting behind the active one."""
        return len(self._pending)

    @property
    def outcomes(self) -> list[JobOutcome]:
        """Finished jobs, oldest first."""
        return list(self._outcomes)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_job(
        self,
        requester: Requester,
        url: str,
        media_type: MediaType,
        format_selector: str,
    ) -> Job:
        """Build a job stamped with a strictly increasing millisecond epoch."""
        stamp = max(int(self._clock() * 1000), self._last_stamp + 1)
        self._last_stamp = stamp
        return Job(
            requester=requester,
            source_url=url,
            format_selector=format_selector,
            media_type=media_type,
            enqueued_at=stamp,
        )

    def enqueue(self, job: Job) -> int:
        """Append *job* and return its 1-based position among pending jobs.

        The executing job, if any, is not counted.  Must be called from
        the event loop thread.
        """
        self._pending.append(job)
        position = len(self._pending)
        logger.info(
            "Queued %s job %s for requester %s (position %d)",
            job.media_type.value,
            job.enqueued_at,
            job.requester.id,
            position,
        )
        self._run_next()
        return position

    async def wait_idle(self) -> None:
        """Block until no job is executing and nothing is pending."""
        await self._idle.wait()

    async def close(self) -> None:
        """Drop pending jobs and cancel the executing one."""
        self._pending.clear()
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._busy = False
        self._active = None
        self._idle.set()

    # ------------------------------------------------------------------
    # Drain loop
    # ------------------------------------------------------------------

    def _run_next(self) -> None:
        if self._busy or not self._pending:
            return
        # Raises outside a running loop; nothing has been mutated yet.
        loop = asyncio.get_running_loop()
        job = self._pending.popleft()
        self._busy = True
        self._active = job
        self._idle.clear()
        self._task = loop.create_task(self._run(job))

    async def _run(self, job: Job) -> None:
        try:
            outcome = await self._execute(job)
            self._outcomes.append(outcome)
        finally:
            self._busy = False
            self._active = None
            self._run_next()
            if not self._busy:
                self._idle.set()

    async def _execute(self, job: Job) -> JobOutcome:
        try:
            output_path = self._store.path_for(job)
            await self._safe_notify(
                job.requester, f"Downloading {job.media_type.value}...",
            )
            logger.info("Starting job %s -> %s", job.enqueued_at, output_path.name)
            await asyncio.to_thread(self._downloader.download, job, output_path)
            produced = self._store.describe(output_path, job.media_type)
        except ToolInvocationFailedError as exc:
            logger.warning("Job %s failed: %s", job.enqueued_at, exc)
            return await self._fail(job, str(exc))
        except Exception as exc:
            logger.exception("Job %s failed unexpectedly", job.enqueued_at)
            return await self._fail(job, f"{type(exc).__name__}: {exc}")

        link = self._store.public_url(produced.filename)
        logger.info(
            "Job %s produced %s (%d bytes)",
            job.enqueued_at,
            produced.filename,
            produced.size_bytes,
        )
        await self._safe_notify(job.requester, self._success_message(produced, link))
        self._sessions.end_session(job.requester.id, url=job.source_url)
        return JobOutcome(job=job, succeeded=True, produced=produced, link=link)

    async def _fail(self, job: Job, error: str) -> JobOutcome:
        await self._safe_notify(
            job.requester, f"{job.media_type.value.capitalize()} download failed.",
        )
        self._sessions.end_session(job.requester.id, url=job.source_url)
        return JobOutcome(job=job, succeeded=False, error=error)

    def _success_message(self, produced: ProducedFile, link: str) -> str:
        return (
            f"Done! {format_filesize(produced.size_bytes)}, "
            f"link expires in {format_hours(self._expiry_hours)}.\n{link}"
        )

    async def _safe_notify(self, requester: Requester, message: str) -> None:
        try:
            await self._notifier.notify(requester, message)
        except Exception:
            logger.exception("Could not notify requester %s", requester.id)
