"""Console implementation of the outbound :class:`Notifier` contract.

Status messages are printed through the shared console.  Offered menus
are rendered as a table and parked until the front end collects them
with :meth:`ConsoleNotifier.take_offer` to prompt the user.
"""

from __future__ import annotations

from collections.abc import Sequence

from ytd_relay.cli.choice_prompt import display_options
from ytd_relay.cli.console import console
from ytd_relay.core.download_flow import SELECT_QUALITY, SELECT_TYPE
from ytd_relay.core.models import Requester
from ytd_relay.exceptions import InvalidInputError

_TITLES: dict[str, str] = {
    SELECT_TYPE: "Download type",
    SELECT_QUALITY: "Video quality",
}


def _markup_safe(text: str) -> str:
    try:
        from rich.markup import escape
    except ModuleNotFoundError:
        return text
    return escape(text)


class ConsoleNotifier:
    """Prints notifications and holds menus offered to each requester."""

    def __init__(self) -> None:
        self._offers: dict[tuple[str, str], list[tuple[str, str]]] = {}
        self.messages: list[tuple[str, str]] = []
        """Every ``(requester_id, message)`` delivered, in order."""

    async def notify(self, requester: Requester, message: str) -> None:
        self.messages.append((requester.id, message))
        console.print(f"[bold cyan]»[/bold cyan] {_markup_safe(message)}")

    async def present_choices(
        self,
        requester: Requester,
        options: Sequence[tuple[str, str]],
        selection_id: str,
    ) -> None:
        offered = list(options)
        self._offers[(requester.id, selection_id)] = offered
        display_options(_TITLES.get(selection_id, selection_id), offered)

    def take_offer(self, requester: Requester, selection_id: str) -> list[tuple[str, str]]:
        """Pop the menu last offered to *requester* under *selection_id*."""
        try:
            return self._offers.pop((requester.id, selection_id))
        except KeyError:
            raise InvalidInputError(
                f"No {_TITLES.get(selection_id, selection_id).lower()} menu is open.",
            ) from None
