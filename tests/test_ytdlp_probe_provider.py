"""Tests for the yt-dlp probe provider (infra/ytdlp_probe_provider.py).

``yt_dlp`` is replaced in ``sys.modules`` by a small fake, so these
tests never touch the network.
"""

from __future__ import annotations

import sys
import types
from typing import Any

import pytest

from ytd_relay.exceptions import ProbeFailedError
from ytd_relay.infra.ytdlp_probe_provider import YtDlpProbeProvider

URL = "https://www.youtube.com/watch?v=abc123"
TABLE = "ID EXT RESOLUTION\n299 mp4 1920x1080 1080p60\n"


class _FakeDownloadError(Exception):
    pass


def _install_fake_ytdlp(
    monkeypatch: pytest.MonkeyPatch,
    *,
    info: Any = None,
    table: Any = TABLE,
    error: Exception | None = None,
) -> list[dict[str, Any]]:
    seen_opts: list[dict[str, Any]] = []

    class _FakeYoutubeDL:
        def __init__(self, opts: dict[str, Any]) -> None:
            seen_opts.append(opts)

        def __enter__(self) -> _FakeYoutubeDL:
            return self

        def __exit__(self, *exc: object) -> None:
            return None

        def extract_info(self, url: str, download: bool = True) -> Any:
            assert download is False
            if error is not None:
                raise error
            return {"id": "abc123", "formats": []} if info is None else info

        def render_formats_table(self, _info: dict[str, Any]) -> Any:
            return table

    utils = types.ModuleType("yt_dlp.utils")
    utils.DownloadError = _FakeDownloadError  # type: ignore[attr-defined]
    module = types.ModuleType("yt_dlp")
    module.YoutubeDL = _FakeYoutubeDL  # type: ignore[attr-defined]
    module.utils = utils  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "yt_dlp", module)
    monkeypatch.setitem(sys.modules, "yt_dlp.utils", utils)
    return seen_opts


class TestBuildOpts:
    def test_metadata_only(self) -> None:
        opts = YtDlpProbeProvider._build_opts()
        assert opts["skip_download"] is True
        assert opts["noplaylist"] is True
        assert opts["quiet"] is True


class TestListFormats:
    def test_returns_rendered_table(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen = _install_fake_ytdlp(monkeypatch)
        assert YtDlpProbeProvider().list_formats(URL) == TABLE
        assert seen[0]["skip_download"] is True

    def test_non_dict_info_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, info="not a dict")
        with pytest.raises(ProbeFailedError, match="no metadata"):
            YtDlpProbeProvider().list_formats(URL)

    def test_empty_table_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, table=None)
        with pytest.raises(ProbeFailedError, match="no formats"):
            YtDlpProbeProvider().list_formats(URL)

    def test_unavailable_media_gets_hint(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(
            monkeypatch, error=_FakeDownloadError("ERROR: Private video. Sign in"),
        )
        with pytest.raises(ProbeFailedError) as exc_info:
            YtDlpProbeProvider().list_formats(URL)
        assert exc_info.value.hint is not None
        assert "private" in exc_info.value.hint

    def test_other_download_error_has_no_hint(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(
            monkeypatch, error=_FakeDownloadError("ERROR: Unsupported URL"),
        )
        with pytest.raises(ProbeFailedError, match="Unsupported URL") as exc_info:
            YtDlpProbeProvider().list_formats(URL)
        assert exc_info.value.hint is None

    def test_unexpected_error_is_wrapped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, error=KeyError("formats"))
        with pytest.raises(ProbeFailedError, match="Unexpected yt-dlp error"):
            YtDlpProbeProvider().list_formats(URL)
