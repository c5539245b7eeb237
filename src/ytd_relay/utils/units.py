"""Human-readable renderings of sizes and durations."""

from __future__ import annotations

_KIB: int = 1024
_MIB: int = 1024 * 1024


def format_filesize(filesize: int | None) -> str:
    """Convert bytes to ``"12.3 MB"`` (``"512.0 KB"`` below 1 MiB), or ``"Unknown"``."""
    if filesize is None:
        return "Unknown"
    if filesize < _MIB:
        return f"{filesize / _KIB:.1f} KB"
    return f"{filesize / _MIB:.1f} MB"


def format_hours(hours: float) -> str:
    """Render ``4`` as ``"4 hours"`` and ``0.5`` as ``"30 minutes"``."""
    if hours < 1:
        minutes = round(hours * 60)
        return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
    whole = int(hours) if float(hours).is_integer() else round(hours, 1)
    return "1 hour" if whole == 1 else f"{whole} hours"
