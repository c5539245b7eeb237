"""Infrastructure: the public downloads directory.

Satisfies :class:`~ytd_relay.core.protocols.FileStore`.  Files are named
``{media_type}_{millis}.{ext}`` by the job that produced them, exposed as
``{base_url}/downloads/{filename}``, and deleted by :meth:`sweep` once
their age reaches the expiry threshold.

Rules
-----
* Files are never modified after creation.
* A failure on one entry never aborts a sweep.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from urllib.parse import quote

from ytd_relay.core.models import Job, MediaType, ProducedFile
from ytd_relay.exceptions import OutputMissingError

logger = logging.getLogger(__name__)

STAGING_DIRNAME: str = ".partial"
PUBLIC_PREFIX: str = "downloads"
DEFAULT_EXPIRY_SECONDS: float = 4 * 3600


class DownloadStore:
    """Local directory holding produced files until they expire.

    Parameters
    ----------
    root:
        Directory served publicly under ``/downloads``.
    base_url:
        Public base address used to build retrieval links.
    expiry_seconds:
        Age after which a file is deleted by :meth:`sweep`.
    clock:
        Returns epoch seconds; injectable for tests.
    """

    def __init__(
        self,
        root: Path,
        base_url: str,
        *,
        expiry_seconds: float = DEFAULT_EXPIRY_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._root = root
        self._base_url = base_url.rstrip("/")
        self._expiry_seconds = expiry_seconds
        self._clock = clock

    @property
    def root(self) -> Path:
        return self._root

    @property
    def staging_dir(self) -> Path:
        return self._root / STAGING_DIRNAME

    def ensure_root(self) -> None:
        self.staging_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # FileStore protocol
    # ------------------------------------------------------------------

    def path_for(self, job: Job) -> Path:
        self.ensure_root()
        return self._root / job.filename

    def describe(self, path: Path, media_type: MediaType | None) -> ProducedFile:
        """Stat *path* into a :class:`ProducedFile`.

        Raises
        ------
        OutputMissingError
            If *path* does not exist or is not a regular file.
        """
        try:
            stat = path.stat()
        except FileNotFoundError as exc:
            raise OutputMissingError(
                f"Expected output file is missing: {path.name}",
            ) from exc
        if not path.is_file():
            raise OutputMissingError(f"Expected output is not a file: {path.name}")
        return ProducedFile(
            path=path,
            media_type=media_type,
            created_at=stat.st_mtime,
            size_bytes=stat.st_size,
        )

    def public_url(self, filename: str) -> str:
        return f"{self._base_url}/{PUBLIC_PREFIX}/{quote(filename)}"

    def sweep(self, now: float | None = None) -> list[Path]:
        """Delete every file whose age has reached the expiry threshold.

        Staged leftovers of interrupted downloads age out the same way.
        Per-file errors are logged and skipped.
        """
        current = self._clock() if now is None else now
        removed: list[Path] = []
        for path in self._candidates():
            try:
                age = current - path.stat().st_mtime
                if age < self._expiry_seconds:
                    continue
                path.unlink()
            except FileNotFoundError:
                logger.debug("Already gone during sweep: %s", path)
                continue
            except OSError as exc:
                logger.warning("Could not delete expired file %s: %s", path, exc)
                continue
            logger.info("Deleted expired file %s (age %.0fs)", path.name, age)
            removed.append(path)
        return removed

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_files(self) -> list[ProducedFile]:
        """Return the public files, oldest first."""
        files: list[ProducedFile] = []
        if not self._root.is_dir():
            return files
        for path in self._root.iterdir():
            if not path.is_file():
                continue
            try:
                files.append(self.describe(path, media_type_from_name(path.name)))
            except OutputMissingError:
                continue
        return sorted(files, key=lambda f: f.created_at)

    def seconds_left(self, produced: ProducedFile, now: float | None = None) -> float:
        """Time until the next sweep may delete *produced*; ``0.0`` once expired."""
        current = self._clock() if now is None else now
        return max(0.0, self._expiry_seconds - (current - produced.created_at))

    def _candidates(self) -> Iterator[Path]:
        for directory in (self._root, self.staging_dir):
            if not directory.is_dir():
                continue
            try:
                entries = list(directory.iterdir())
            except OSError as exc:
                logger.warning("Could not list %s: %s", directory, exc)
                continue
            for path in entries:
                if path.is_file():
                    yield path


def media_type_from_name(filename: str) -> MediaType | None:
    """Recover the media type from an ``audio_…``/``video_…`` filename."""
    prefix = filename.split("_", 1)[0]
    try:
        return MediaType(prefix)
    except ValueError:
        return None
