"""Tests for the per-requester session store (core/session_store.py)."""

from __future__ import annotations

import pytest

from ytd_relay.core.models import MediaType
from ytd_relay.core.session_store import SessionStore
from ytd_relay.exceptions import InvalidInputError, NoActiveSessionError

URL = "https://www.youtube.com/watch?v=abc123"


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestSessionLifecycle:
    def test_begin_then_get_url(self) -> None:
        store = SessionStore()
        store.begin_session("u1", URL)
        assert store.get_url("u1") == URL
        assert "u1" in store
        assert len(store) == 1

    def test_begin_strips_whitespace(self) -> None:
        store = SessionStore()
        store.begin_session("u1", f"  {URL}\n")
        assert store.get_url("u1") == URL

    def test_begin_replaces_previous(self) -> None:
        store = SessionStore()
        store.begin_session("u1", URL)
        store.record_choice("u1", MediaType.VIDEO)
        store.begin_session("u1", "https://example.com/other")

        session = store.get_session("u1")
        assert session is not None
        assert session.source_url == "https://example.com/other"
        assert session.pending_type is None

    def test_requesters_are_independent(self) -> None:
        store = SessionStore()
        store.begin_session("u1", URL)
        store.begin_session("u2", "https://example.com/other")
        store.end_session("u1")
        assert "u1" not in store
        assert store.get_url("u2") == "https://example.com/other"

    def test_record_choice(self) -> None:
        store = SessionStore()
        store.begin_session("u1", URL)
        store.record_choice("u1", MediaType.AUDIO)
        session = store.get_session("u1")
        assert session is not None
        assert session.pending_type is MediaType.AUDIO


# ---------------------------------------------------------------------------
# Missing sessions
# ---------------------------------------------------------------------------

class TestNoActiveSession:
    def test_get_url_raises(self) -> None:
        with pytest.raises(NoActiveSessionError) as exc_info:
            SessionStore().get_url("ghost")
        assert exc_info.value.hint is not None

    def test_record_choice_raises(self) -> None:
        with pytest.raises(NoActiveSessionError):
            SessionStore().record_choice("ghost", MediaType.AUDIO)

    def test_get_session_returns_none(self) -> None:
        assert SessionStore().get_session("ghost") is None

    def test_end_session_is_noop(self) -> None:
        store = SessionStore()
        store.end_session("ghost")
        assert len(store) == 0


# ---------------------------------------------------------------------------
# Guarded removal
# ---------------------------------------------------------------------------

class TestEndSessionGuard:
    def test_matching_url_removes(self) -> None:
        store = SessionStore()
        store.begin_session("u1", URL)
        store.end_session("u1", url=URL)
        assert "u1" not in store

    def test_newer_submission_survives(self) -> None:
        store = SessionStore()
        store.begin_session("u1", URL)
        store.begin_session("u1", "https://example.com/newer")
        store.end_session("u1", url=URL)
        assert store.get_url("u1") == "https://example.com/newer"


# ---------------------------------------------------------------------------
# URL validation
# ---------------------------------------------------------------------------

class TestValidateUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=abc123",
            "http://example.com/video.mp4",
            "https://youtu.be/abc123?t=10",
        ],
    )
    def test_accepts(self, url: str) -> None:
        assert SessionStore.validate_url(url) == url

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "   ",
            "not a url",
            "ftp://example.com/file",
            "www.youtube.com/watch?v=abc",
            "https://",
            "https://exa mple.com/v",
            "https://[::1/v",
        ],
    )
    def test_rejects(self, url: str) -> None:
        with pytest.raises(InvalidInputError):
            SessionStore.validate_url(url)

    def test_rejected_url_creates_no_session(self) -> None:
        store = SessionStore()
        with pytest.raises(InvalidInputError):
            store.begin_session("u1", "nope")
        assert "u1" not in store

    def test_rejected_url_keeps_existing_session(self) -> None:
        store = SessionStore()
        store.begin_session("u1", URL)
        with pytest.raises(InvalidInputError):
            store.begin_session("u1", "nope")
        assert store.get_url("u1") == URL
