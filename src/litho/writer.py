# writer logic
import logging
import time
from collections.abc import Iterable, Sequence
from pathlib import Path
from urllib.parse import quote

import requests

from litho.errors import DownloadError
from litho.google_photos.models import MediaItem

logger = logging.getLogger(__name__)

PAUSE_WRITE = 0.25
CHUNK_SIZE = 1024 * 1024
PART_SUFFIX = ".part"


def safe_filename(item: MediaItem) -> str:
    """Percent-encode a remote filename into a single path segment."""
    name = item.filename or item.id
    encoded = quote(name, safe="")
    if encoded in (".", ".."):
        encoded = encoded.replace(".", "%2E")
    return encoded


def download_url(item: MediaItem) -> str:
    """Base URL with the suffix asking for original bytes."""
    return f"{item.base_url}={'dv' if item.is_video else 'd'}"


class MediaWriter:
    """
    Writes media items under ``root/YYYY/MM/DD/``.

    The day comes from each item's own creation time. A file that already
    exists is never downloaded again, which is what makes re-runs resume.
    """

    def __init__(self, root: Path | str, pause: float = PAUSE_WRITE, timeout: float = 60.0):
        self.root = Path(root)
        self.pause = pause
        self.timeout = timeout

    def path_for(self, item: MediaItem) -> Path:
        created = item.created_on
        return (
            self.root
            / str(created.year)
            / f"{created.month:02d}"
            / f"{created.day:02d}"
            / safe_filename(item)
        )

    def write(self, pages: Iterable[Sequence[MediaItem]], limit: int | None = None) -> int:
        """
        Write items in arrival order until ``limit`` have been accepted.

        Items past the limit are skipped but ``pages`` is still drained so a
        producer feeding it never blocks. Returns total bytes written.
        """
        total = "∞" if limit is None else str(limit)
        accepted = 0
        written = 0
        for page in pages:
            for item in page:
                if limit is not None and accepted >= limit:
                    continue
                accepted += 1
                path = self.path_for(item)
                logger.info(f"[{accepted}/{total}]\t{path.relative_to(self.root)}")
                written += self.write_item(item, path)
        logger.info(f"Wrote {written} bytes for {accepted} items")
        return written

    def write_items(self, items: Sequence[MediaItem], limit: int | None = None) -> int:
        return self.write([items], limit)

    def write_item(self, item: MediaItem, path: Path | None = None) -> int:
        """Download one item unless its file exists. Returns bytes written."""
        path = path or self.path_for(item)
        if path.exists():
            logger.debug(f"Already have {path}, skipping")
            return 0

        part = path.with_name(path.name + PART_SUFFIX)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            size = self._download(download_url(item), part)
            part.replace(path)
        except requests.RequestException as e:
            part.unlink(missing_ok=True)
            raise DownloadError(f"Download failed for {item.filename} ({item.id}): {e}") from e
        except OSError as e:
            part.unlink(missing_ok=True)
            raise DownloadError(f"Could not write {path}: {e}") from e

        time.sleep(self.pause)
        return size

    def _download(self, url: str, dest: Path) -> int:
        size = 0
        with requests.get(url, stream=True, timeout=self.timeout) as r:
            r.raise_for_status()
            with open(dest, "wb") as f:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    f.write(chunk)
                    size += len(chunk)
        return size
