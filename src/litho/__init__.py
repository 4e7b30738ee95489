"""
litho - Incremental Google Photos downloader.

Authorizes with OAuth2 + PKCE, then downloads newly added media items into a
year/month/day directory tree, resuming from the most recent synced day.
"""

__version__ = "0.1.0"

from litho.config import Settings
from litho.date_cursor import most_recent_date, sync_window
from litho.errors import LithoError

__all__ = [
    "__version__",
    "Settings",
    "LithoError",
    "most_recent_date",
    "sync_window",
]
