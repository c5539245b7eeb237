"""ytd-relay — serialized yt-dlp download relay with expiring links.

Requesters submit a media URL, pick audio or a video quality, and get a
time-limited retrieval link once the single-flight job queue has
produced the file.
"""

from ytd_relay.version import __version__

__all__: list[str] = ["__version__"]
