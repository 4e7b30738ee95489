"""
Sync cursor derived from the download tree.

The tree is ``root/YYYY/MM/DD/<file>``. Segment names are fixed-width and
zero padded, so the lexicographically greatest name at each level is also the
numerically greatest and three descents find the last synced day. There is no
separate state file.
"""

import logging
from datetime import date
from pathlib import Path

from litho.google_photos.models import EPOCH, DateRange, YearMonthDay

logger = logging.getLogger(__name__)


def _last_entry(base: Path) -> str | None:
    """Greatest numeric directory name directly under ``base``."""
    try:
        names = [
            p.name
            for p in base.iterdir()
            if p.is_dir() and p.name.isascii() and p.name.isdigit()
        ]
    except (FileNotFoundError, NotADirectoryError):
        return None
    return max(names) if names else None


def most_recent_date(root: Path | str) -> YearMonthDay | None:
    """
    Return the newest year/month/day present under ``root``.

    Returns None when ``root`` is missing or any level is empty, i.e. nothing
    has been synced yet. The result is not checked against the calendar.
    """
    base = Path(root)
    parts = []
    for _ in range(3):
        name = _last_entry(base)
        if name is None:
            return None
        parts.append(int(name))
        base = base / name
    ymd = YearMonthDay(*parts)
    logger.debug(f"Most recent synced date under {root}: {ymd}")
    return ymd


def sync_window(root: Path | str, today: date | None = None) -> DateRange:
    """Date filter for this run: last synced day (or 1970-01-01) through today."""
    start = most_recent_date(root) or EPOCH
    end = YearMonthDay.from_date(today or date.today())
    return DateRange(start=start, end=end)
