"""Request flow: URL → type → quality → queued job.

:class:`DownloadFlow` implements the inbound half of the front-end
contract.  It owns no state of its own; it moves a requester through the
session store, the format prober, and the job queue, and talks back
through the :class:`~ytd_relay.core.protocols.Notifier`.

Typed :class:`~ytd_relay.exceptions.YtdRelayError` subclasses are raised
to the caller, which acts as the error boundary for that request.
"""

from __future__ import annotations

import asyncio
import logging

from ytd_relay.core.download_service import AUDIO_SELECTOR
from ytd_relay.core.format_prober import FormatProber
from ytd_relay.core.job_queue import JobQueue
from ytd_relay.core.models import FormatCollection, Job, MediaType, Requester
from ytd_relay.core.protocols import Notifier
from ytd_relay.core.session_store import SessionStore
from ytd_relay.exceptions import InvalidInputError, ProbeFailedError

logger = logging.getLogger(__name__)

SELECT_TYPE: str = "select_type"
SELECT_QUALITY: str = "select_quality"

TYPE_OPTIONS: tuple[tuple[str, str], ...] = (
    ("Video", MediaType.VIDEO.value),
    ("Audio", MediaType.AUDIO.value),
)


class DownloadFlow:
    """Drives one requester at a time from URL submission to enqueue."""

    def __init__(
        self,
        sessions: SessionStore,
        prober: FormatProber,
        queue: JobQueue,
        notifier: Notifier,
    ) -> None:
        self._sessions = sessions
        self._prober = prober
        self._queue = queue
        self._notifier = notifier

    async def submit_url(self, requester: Requester, url: str) -> None:
        """Store *url* for *requester* and offer the type menu.

        Raises
        ------
        InvalidInputError
            If *url* is malformed; nothing is stored.
        """
        self._sessions.begin_session(requester.id, url)
        await self._notifier.present_choices(requester, TYPE_OPTIONS, SELECT_TYPE)

    async def choose_type(
        self, requester: Requester, choice: str,
    ) -> Job | FormatCollection:
        """Handle the type menu.

        Audio is queued straight away and the :class:`Job` returned.
        Video probes the URL, offers the quality menu, and returns the
        offered :class:`FormatCollection`.

        Raises
        ------
        NoActiveSessionError
            If the requester has no stored URL.
        InvalidInputError
            If *choice* is neither ``"audio"`` nor ``"video"``.
        ProbeFailedError
            If the video qualities could not be listed.
        """
        url = self._sessions.get_url(requester.id)
        media_type = self._parse_type(choice)
        self._sessions.record_choice(requester.id, media_type)

        if media_type is MediaType.AUDIO:
            job = self._queue.create_job(requester, url, MediaType.AUDIO, AUDIO_SELECTOR)
            position = self._queue.enqueue(job)
            await self._notifier.notify(
                requester, f"Added to audio download queue (position {position}).",
            )
            return job

        await self._notifier.notify(requester, "Fetching video qualities...")
        try:
            choices = await asyncio.to_thread(self._prober.probe_qualities, url)
        except ProbeFailedError as exc:
            logger.warning("Probe failed for %s: %s", url, exc)
            await self._notifier.notify(requester, "Failed to fetch video formats.")
            raise
        await self._notifier.present_choices(
            requester, choices.as_options(), SELECT_QUALITY,
        )
        return choices

    async def choose_quality(self, requester: Requester, format_selector: str) -> Job:
        """Queue a video job for the chosen *format_selector*.

        Raises
        ------
        NoActiveSessionError
            If the requester has no stored URL; nothing is queued.
        InvalidInputError
            If *format_selector* is empty.
        """
        url = self._sessions.get_url(requester.id)
        selector = format_selector.strip()
        if not selector:
            raise InvalidInputError("No video quality selected.")

        job = self._queue.create_job(requester, url, MediaType.VIDEO, selector)
        position = self._queue.enqueue(job)
        await self._notifier.notify(
            requester, f"Added to video download queue (position {position}).",
        )
        return job

    @staticmethod
    def _parse_type(choice: str) -> MediaType:
        try:
            return MediaType(choice.strip().lower())
        except ValueError as exc:
            raise InvalidInputError(
                f"Unknown download type: {choice!r}",
                hint="Choose 'audio' or 'video'.",
            ) from exc
