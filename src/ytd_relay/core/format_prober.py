"""Core format prober — turns a probe listing into ranked quality choices.

Depends on a :class:`~ytd_relay.core.protocols.ProbeProvider` injected
at construction time (dependency inversion), keeping the core free of
any external-system imports.

Guarantees
----------
* Pure orchestration — no I/O, no ``print()``, no filesystem access.
* Only :class:`~ytd_relay.exceptions.ProbeFailedError` escapes.
* Blocking and idempotent; failures are reported, never retried.
"""

from __future__ import annotations

import logging

from ytd_relay.core.format_filter import (
    DEFAULT_MAX_CHOICES,
    parse_probe_output,
    select_choices,
)
from ytd_relay.core.models import FormatCollection
from ytd_relay.core.protocols import ProbeProvider
from ytd_relay.exceptions import (
    ProbeFailedError,
    YtdRelayError,
    append_ytdlp_upgrade_suggestion,
)

logger = logging.getLogger(__name__)


class FormatProber:
    """Stateless service that lists and ranks selectable video qualities.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`ProbeProvider` protocol.
    max_choices:
        Upper bound on the number of returned choices.
    """

    def __init__(
        self,
        provider: ProbeProvider,
        *,
        max_choices: int = DEFAULT_MAX_CHOICES,
    ) -> None:
        self._provider: ProbeProvider = provider
        self._max_choices: int = max_choices

    def probe_qualities(self, url: str) -> FormatCollection:
        """Return de-duplicated, ranked choices for *url*.

        Raises
        ------
        ProbeFailedError
            If the listing cannot be fetched, is empty, or yields no
            usable video formats.
        """
        listing = self._fetch(url)
        if not listing.strip():
            raise ProbeFailedError(
                "The format listing was empty.",
                hint="The URL may not point to downloadable media.",
            )

        parsed = parse_probe_output(listing)
        selected = select_choices(parsed, self._max_choices)
        if not selected:
            raise ProbeFailedError(
                "No selectable video qualities found.",
                hint=append_ytdlp_upgrade_suggestion(
                    "The media may be audio-only; choose Audio instead.",
                ),
            )

        logger.debug(
            "Probed %s: %d formats parsed, %d offered", url, len(parsed), len(selected),
        )
        return FormatCollection(choices=tuple(selected))

    def _fetch(self, url: str) -> str:
        """Call the provider and ensure only our exceptions escape."""
        try:
            return self._provider.list_formats(url)
        except ProbeFailedError:
            raise
        except YtdRelayError as exc:
            raise ProbeFailedError(str(exc), hint=exc.hint) from exc
        except Exception as exc:
            raise ProbeFailedError(
                f"Unexpected probe error: {exc}",
            ) from exc
