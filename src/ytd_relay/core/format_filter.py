"""Pure parsing, ranking, and deduplication of probe listings.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.

Pipeline order (enforced by :func:`select_choices`):

1. **Parse** — one :class:`FormatChoice` per listing line that carries
   a format identifier and a resolution marker.
2. **Sort** — resolution desc → fps desc → mp4 preferred (stable).
3. **Deduplicate** — first occurrence of each label wins.
4. **Cap** — keep at most ``limit`` entries.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from ytd_relay.core.models import FormatChoice

DEFAULT_MAX_CHOICES: int = 25

# Any first token that is not a table border or an "[info]" banner.
_FORMAT_ID_RE = re.compile(r"^[^\s|\[\-\u2500][^\s|]*$")
_HEADER_ID: str = "ID"
# "1080p", "1080p60", "720p50"
_HEIGHT_MARKER_RE = re.compile(r"(?<![\w.])(\d{3,4})p(\d{2,3})?(?![\w])")
# "1920x1080"
_DIMENSIONS_RE = re.compile(r"(?<![\w.])\d{2,5}x(\d{2,5})(?![\w])")
_SKIP_MARKERS: tuple[str, ...] = ("audio only", "storyboard", "mhtml")
_HIGH_FPS: int = 60
_DEFAULT_FPS: int = 30


# ---------------------------------------------------------------------------
# 1. Parse
# ---------------------------------------------------------------------------

def parse_probe_line(line: str) -> FormatChoice | None:
    """Parse one listing line, or return ``None`` when it is not a format.

    The first whitespace-separated token is the format identifier and
    the second, when present, the container extension.  The height comes
    from a ``1080p``-style marker, falling back to ``WIDTHxHEIGHT``.
    """
    tokens = line.split()
    if len(tokens) < 2:
        return None

    format_id = tokens[0]
    if format_id == _HEADER_ID or not _FORMAT_ID_RE.match(format_id):
        return None

    lowered = line.lower()
    if any(marker in lowered for marker in _SKIP_MARKERS):
        return None

    height: int | None = None
    marker_fps: str | None = None
    match = _HEIGHT_MARKER_RE.search(line)
    if match is not None:
        height = int(match.group(1))
        marker_fps = match.group(2)
    else:
        dims = _DIMENSIONS_RE.search(line)
        if dims is not None:
            height = int(dims.group(1))

    if not height:
        return None

    fps = _DEFAULT_FPS
    if "60fps" in lowered or marker_fps == "60":
        fps = _HIGH_FPS

    second = tokens[1]
    ext = second.lower() if second.isalnum() and not second[0].isdigit() else ""
    return FormatChoice(format_selector=format_id, height=height, fps=fps, ext=ext)


def parse_probe_output(text: str) -> list[FormatChoice]:
    """Parse every line of *text*, dropping lines that are not formats."""
    parsed = (parse_probe_line(line) for line in text.splitlines())
    return [choice for choice in parsed if choice is not None]


# ---------------------------------------------------------------------------
# 2. Sort
# ---------------------------------------------------------------------------

def _sort_key(choice: FormatChoice) -> tuple[int, int, int]:
    """Compute a sort key that orders choices for presentation.

    * Higher resolution first  → negate height
    * Higher fps first          → negate fps
    * mp4 before other exts     → 0 for mp4, 1 otherwise
    """
    ext_priority: int = 0 if choice.ext == "mp4" else 1
    return (-choice.height, -choice.fps, ext_priority)


def sort_choices(choices: Iterable[FormatChoice]) -> list[FormatChoice]:
    """Sort by resolution desc, fps desc, mp4 preferred; ties keep input order."""
    return sorted(choices, key=_sort_key)


# ---------------------------------------------------------------------------
# 3. Deduplicate
# ---------------------------------------------------------------------------

def deduplicate_by_label(choices: Iterable[FormatChoice]) -> list[FormatChoice]:
    """Collapse choices sharing a label; the **first** occurrence wins."""
    seen: set[str] = set()
    result: list[FormatChoice] = []
    for choice in choices:
        if choice.label not in seen:
            seen.add(choice.label)
            result.append(choice)
    return result


# ---------------------------------------------------------------------------
# Composite pipeline
# ---------------------------------------------------------------------------

def select_choices(
    choices: Sequence[FormatChoice],
    limit: int = DEFAULT_MAX_CHOICES,
) -> list[FormatChoice]:
    """Run sort → deduplicate → cap.  Returns ``[]`` when nothing qualifies."""
    return deduplicate_by_label(sort_choices(choices))[:limit]
