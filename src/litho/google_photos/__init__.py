"""
Google Photos API integration.

Provides OAuth authentication and paginated media search.
"""

from litho.google_photos.api import PageFetcher
from litho.google_photos.auth import TokenAuthority, extract_code, get_access_token
from litho.google_photos.models import DateRange, MediaItem, Page, YearMonthDay

__all__ = [
    "TokenAuthority",
    "extract_code",
    "get_access_token",
    "PageFetcher",
    "DateRange",
    "MediaItem",
    "Page",
    "YearMonthDay",
]
