# photos API logic
import logging
import time

import requests

from litho.errors import FetchError, SearchError, SerError
from litho.google_photos.models import DateRange, MediaItem, Page
from litho.pipeline import PageChannel

logger = logging.getLogger(__name__)

API_BASE_URL = "https://photoslibrary.googleapis.com"
PAGE_SIZE = 25
PAUSE_FETCH = 1.0
ORDER_BY = "MediaMetadata.creation_time"


def search_body(date_range: DateRange, page_size: int, page_token: str | None = None) -> dict:
    """Request body for ``mediaItems:search`` filtered to ``date_range``."""
    body: dict = {
        "orderBy": ORDER_BY,
        "filters": {"dateFilter": date_range.to_api()},
        "pageSize": page_size,
    }
    if page_token:
        body["pageToken"] = page_token
    return body


class PageFetcher:
    """
    Streams search results page by page.

    Items keep the server's order within a page and the cursor order across
    pages. Creation-time order is requested but not relied on.
    """

    def __init__(
        self,
        access_token: str,
        date_range: DateRange,
        base_url: str = API_BASE_URL,
        page_size: int = PAGE_SIZE,
        pause: float = PAUSE_FETCH,
        timeout: float = 60.0,
    ):
        self.uri = f"{base_url.rstrip('/')}/v1/mediaItems:search"
        self.date_range = date_range
        self.page_size = page_size
        self.pause = pause
        self.timeout = timeout
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    def fetch_page(self, page_token: str | None = None) -> Page:
        body = search_body(self.date_range, self.page_size, page_token)
        try:
            r = requests.post(self.uri, headers=self._headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"Search request failed: {e}") from e
        if r.status_code != 200:
            raise SearchError(r.status_code, r.text)
        try:
            data = r.json()
        except ValueError as e:
            raise SerError("Search response is not JSON") from e
        return Page.from_api(data)

    def fetch(self, limit: int | None, channel) -> int:
        """
        Send each page's items to ``channel`` until the cursor runs out or
        ``limit`` items have been sent.

        The limit is only checked between pages, so the last page may push the
        total past it. The writer trims to the exact count. Returns the number
        of items sent.
        """
        total = 0
        page_token = None
        while limit is None or total < limit:
            page = self.fetch_page(page_token)
            total += len(page.items)
            logger.debug(f"Fetched page of {len(page.items)} items ({total} total)")
            channel.send(page.items)
            if page.is_last:
                break
            page_token = page.next_page_token
            time.sleep(self.pause)
        return total

    def fetch_all(self, limit: int | None = None) -> list[MediaItem]:
        """Fetch every page up front and return the items in order."""
        channel = PageChannel()
        self.fetch(limit, channel)
        channel.close()
        return [item for page in channel for item in page]
