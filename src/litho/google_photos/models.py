"""Value types exchanged with the Photos Library API."""

from dataclasses import dataclass, field
from datetime import date, datetime

from litho.errors import SerError


@dataclass(frozen=True, order=True)
class YearMonthDay:
    """
    A calendar day as the API's ``Date`` message.

    Not validated against the calendar: the sync cursor is read from directory
    names and is passed through as found.
    """

    year: int
    month: int
    day: int

    @classmethod
    def from_date(cls, d: date) -> "YearMonthDay":
        return cls(d.year, d.month, d.day)

    def to_api(self) -> dict[str, int]:
        return {"year": self.year, "month": self.month, "day": self.day}

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


EPOCH = YearMonthDay(1970, 1, 1)


@dataclass(frozen=True)
class DateRange:
    """Inclusive date filter sent with every search request."""

    start: YearMonthDay
    end: YearMonthDay

    def to_api(self) -> dict:
        return {"ranges": [{"startDate": self.start.to_api(), "endDate": self.end.to_api()}]}


@dataclass(frozen=True)
class MediaItem:
    """
    One remote media item.

    ``base_url`` is a capability URL that is only valid for a limited time
    after the search response that carried it.
    """

    id: str
    base_url: str
    mime_type: str
    creation_time: str
    filename: str

    @classmethod
    def from_api(cls, data: dict) -> "MediaItem":
        """Build an item from a ``mediaItems[]`` entry of a search response."""
        try:
            return cls(
                id=data["id"],
                base_url=data["baseUrl"],
                mime_type=data.get("mimeType", ""),
                creation_time=data["mediaMetadata"]["creationTime"],
                filename=data.get("filename", ""),
            )
        except (KeyError, TypeError) as e:
            raise SerError(f"Malformed media item: missing {e}") from e

    @property
    def created_on(self) -> datetime:
        """Creation timestamp; the date keeps the timestamp's own offset."""
        try:
            return datetime.fromisoformat(self.creation_time.replace("Z", "+00:00"))
        except ValueError as e:
            raise SerError(f"Bad creationTime for {self.id}: {self.creation_time!r}") from e

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")


@dataclass(frozen=True)
class Page:
    """One search response: its items and the cursor for the next request."""

    items: list[MediaItem] = field(default_factory=list)
    next_page_token: str | None = None

    @property
    def is_last(self) -> bool:
        return not self.next_page_token

    @classmethod
    def from_api(cls, data: dict) -> "Page":
        if not isinstance(data, dict):
            raise SerError(f"Expected a JSON object, got {type(data).__name__}")
        raw_items = data.get("mediaItems") or []
        if not isinstance(raw_items, list):
            raise SerError("mediaItems is not a list")
        return cls(
            items=[MediaItem.from_api(item) for item in raw_items],
            next_page_token=data.get("nextPageToken") or None,
        )
