"""Interactive menu rendering and selection for the console front end.

This module is responsible for:

* Rendering a Rich table of the options offered by the download flow.
* Prompting the user to pick one via questionary arrow keys.
* Returning the selected option value as a string.

All display-related logic lives here — no business logic, no
downloading, no probing.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ytd_relay.cli.console import console
from ytd_relay.exceptions import EnvironmentError, InvalidInputError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for menu rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

def _build_choice_label(index: int, label: str) -> str:
    """Build the single-line label shown in the questionary selector.

    Format: ``"  1.  1080p 60fps"``
    """
    return f"  {index + 1}.  {label}"


def display_options(title: str, options: Sequence[tuple[str, str]]) -> None:
    """Print a Rich table summarising *options*."""
    table_class = _import_rich_table()

    table = table_class(
        title=title,
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Option", justify="left", min_width=12)
    table.add_column("Value", justify="left", style="dim")

    for i, (label, value) in enumerate(options, start=1):
        table.add_row(str(i), label, value)

    console.print()
    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# Public prompt function
# ---------------------------------------------------------------------------

async def prompt_choice(message: str, options: Sequence[tuple[str, str]]) -> str:
    """Prompt for one of ``(label, value)`` *options* and return its value.

    Raises
    ------
    InvalidInputError
        If there is nothing to choose from, or the user cancels the
        prompt (Esc / Ctrl+C return ``None``).
    """
    if not options:
        raise InvalidInputError("Nothing to choose from.")

    questionary = _import_questionary()

    choices = [
        questionary.Choice(title=_build_choice_label(i, label), value=value)
        for i, (label, value) in enumerate(options)
    ]

    selected: str | None = await questionary.select(
        message,
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask_async()

    if selected is None:
        raise InvalidInputError(
            "No option selected.",
            hint="Use arrow keys to pick an option, then press Enter.",
        )

    return selected
