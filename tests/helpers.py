"""Builders for media items and mocked HTTP responses."""

from unittest.mock import MagicMock

from litho.google_photos.models import MediaItem


def make_item(
    n: int = 1,
    creation_time: str = "2023-09-30T12:00:00Z",
    filename: str | None = None,
    mime_type: str = "image/jpeg",
) -> MediaItem:
    return MediaItem(
        id=f"id{n}",
        base_url=f"https://lh3.example.com/item{n}",
        mime_type=mime_type,
        creation_time=creation_time,
        filename=filename if filename is not None else f"IMG_{n:04d}.jpg",
    )


def api_item(n: int = 1, creation_time: str = "2023-09-30T12:00:00Z") -> dict:
    """A mediaItems[] entry as the search endpoint returns it."""
    return {
        "id": f"id{n}",
        "baseUrl": f"https://lh3.example.com/item{n}",
        "mimeType": "image/jpeg",
        "mediaMetadata": {"creationTime": creation_time, "width": "4032", "height": "3024"},
        "filename": f"IMG_{n:04d}.jpg",
    }


def json_response(payload, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.text = str(payload)
    return resp


def download_response(content: bytes, chunk: int = 4) -> MagicMock:
    """Mock usable as ``with requests.get(url, stream=True) as r``."""
    resp = MagicMock()
    resp.iter_content.return_value = [content[i : i + chunk] for i in range(0, len(content), chunk)]
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp
