"""Per-requester session store.

A session links a submitted URL to the in-progress type/quality
selection.  The store is a plain dict owned by the event-loop thread;
every mutation goes through the methods below.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from ytd_relay.core.models import MediaType, Session
from ytd_relay.exceptions import InvalidInputError, NoActiveSessionError

logger = logging.getLogger(__name__)


class SessionStore:
    """Maps requester ids to their pending :class:`Session`."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, requester_id: object) -> bool:
        return requester_id in self._sessions

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def begin_session(self, requester_id: str, url: str) -> None:
        """Start (or replace) the session for *requester_id*.

        Raises
        ------
        InvalidInputError
            If *url* is not an absolute http(s) URL.  No session is
            created or replaced in that case.
        """
        cleaned = self.validate_url(url)
        if requester_id in self._sessions:
            logger.debug("Replacing session for requester %s", requester_id)
        self._sessions[requester_id] = Session(source_url=cleaned)

    def record_choice(self, requester_id: str, media_type: MediaType) -> None:
        self._require(requester_id).pending_type = media_type

    def get_url(self, requester_id: str) -> str:
        return self._require(requester_id).source_url

    def get_session(self, requester_id: str) -> Session | None:
        return self._sessions.get(requester_id)

    def end_session(self, requester_id: str, *, url: str | None = None) -> None:
        """Drop the session for *requester_id*; no-op when absent.

        When *url* is given, the session is only dropped if it still
        points at *url*, so a finished job does not discard a newer
        submission from the same requester.
        """
        session = self._sessions.get(requester_id)
        if session is None:
            return
        if url is not None and session.source_url != url:
            return
        del self._sessions[requester_id]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, requester_id: str) -> Session:
        session = self._sessions.get(requester_id)
        if session is None:
            raise NoActiveSessionError(
                "No active download session.",
                hint="The URL expired; submit it again to restart.",
            )
        return session

    @staticmethod
    def validate_url(url: str) -> str:
        """Return the stripped *url* or raise :class:`InvalidInputError`."""
        stripped = url.strip()
        if not stripped:
            raise InvalidInputError("URL must not be empty.")
        try:
            parts = urlsplit(stripped)
            hostname = parts.hostname
        except ValueError as exc:
            raise InvalidInputError(f"Invalid URL: {stripped}") from exc
        if parts.scheme not in ("http", "https") or not hostname:
            raise InvalidInputError(
                f"Invalid URL: {stripped}",
                hint="URL must be absolute and start with http:// or https://",
            )
        if any(ch.isspace() for ch in stripped):
            raise InvalidInputError(
                f"Invalid URL: {stripped}",
                hint="URL must not contain whitespace.",
            )
        return stripped
