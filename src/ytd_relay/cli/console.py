"""Console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``, ``sweep``)
remain functional even when Rich is not installed.
"""

from __future__ import annotations

import sys
from typing import Any

from ytd_relay.exceptions import EnvironmentError, YtdRelayError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console() -> Any:
	"""Create a Rich console instance targeting stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=True)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(*objects, file=sys.stderr)
			return
		rich_console.print(*objects)


console = _ConsoleProxy()


def render_error(exc: YtdRelayError) -> None:
	"""Print *exc* and its hint the way the CLI error boundary does."""
	console.print(f"[bold red]Error:[/bold red] {exc}")
	if exc.hint:
		console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
