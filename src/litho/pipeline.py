"""
Producer/consumer plumbing between the page fetcher and the media writer.

The fetcher runs on its own thread and sends pages into an unbounded
``PageChannel``; the calling thread drains it through the writer. Closing the
channel is the only end-of-stream signal.
"""

import logging
import queue
import threading
from collections.abc import Iterator

logger = logging.getLogger(__name__)


class ChannelClosed(Exception):
    """Raised when sending on a closed channel."""


class PageChannel:
    """Unbounded single-producer/single-consumer channel of pages."""

    _CLOSED = object()

    def __init__(self):
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, items) -> None:
        with self._lock:
            if self._closed:
                raise ChannelClosed("send on closed channel")
            self._queue.put(list(items))

    def close(self) -> None:
        with self._lock:
            if not self._closed:
                self._closed = True
                self._queue.put(self._CLOSED)

    def __iter__(self) -> Iterator[list]:
        while True:
            page = self._queue.get()
            if page is self._CLOSED:
                return
            yield page


def run_pipeline(fetcher, writer, limit: int | None = None) -> int:
    """
    Fetch on a background thread while writing on this one.

    Returns total bytes written. An error raised by the fetcher closes the
    channel, lets the writer finish what already arrived, and is then
    re-raised here. An error raised by the writer closes the channel too, so
    the fetcher stops at its next send; it is joined before the error
    propagates.
    """
    channel = PageChannel()
    failures: list[BaseException] = []

    def produce():
        try:
            sent = fetcher.fetch(limit, channel)
            logger.debug(f"Fetcher finished after {sent} items")
        except ChannelClosed:
            logger.debug("Writer stopped; fetcher stopping")
        except Exception as e:
            failures.append(e)
        finally:
            channel.close()

    producer = threading.Thread(target=produce, name="page-fetcher", daemon=True)
    producer.start()
    try:
        written = writer.write(channel, limit)
    finally:
        channel.close()
        producer.join()
    if failures:
        raise failures[0]
    return written
