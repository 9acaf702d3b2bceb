"""Pull-driven collators that turn paged questions into a document stream.

Nothing happens until the consumer asks for the next document. A page is
fetched only when the buffer is empty, one request at a time, in cursor
order. Terminal states stick: DONE keeps ending the stream and FAILED keeps
raising the stored error, neither fetches again.
"""
from __future__ import annotations
import asyncio
import logging
import threading
from collections import deque
from enum import Enum
from typing import Deque, Optional

from qa2index.crawl.base import AsyncQetaFetcher
from qa2index.crawl.qeta_requests import QetaFetcher
from qa2index.index.flatten import DEFAULT_PREFIX, flatten_page
from qa2index.index.models import Document
from qa2index.ingest.models import Page

logger = logging.getLogger(__name__)


class CollatorState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DRAINING = "draining"
    DONE = "done"
    FAILED = "failed"


class _CollatorCore:
    # close() may come from another thread while a fetch is outstanding;
    # every state/cursor/buffer write happens under _lock and is skipped once cancelled
    def __init__(self, location_prefix: str = DEFAULT_PREFIX, max_pages: Optional[int] = None):
        self.location_prefix = location_prefix
        self.max_pages = max_pages
        self.state = CollatorState.IDLE
        self.error: Optional[BaseException] = None
        self.cancelled = False
        self.pages_fetched = 0
        self.documents_yielded = 0
        self._cursor: Optional[int] = 0
        self._buffer: Deque[Document] = deque()
        self._lock = threading.Lock()

    @property
    def cursor(self) -> Optional[int]:
        return self._cursor

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def _terminal(self) -> bool:
        return self.state in (CollatorState.DONE, CollatorState.FAILED)

    def _bound_reached(self) -> bool:
        return self.max_pages is not None and self.pages_fetched >= self.max_pages

    def _begin_fetch(self) -> Optional[int]:
        """Cursor to fetch next, or None when there is nothing left to fetch."""
        with self._lock:
            if self.cancelled or self._terminal():
                return None
            assert self.state is CollatorState.IDLE and not self._buffer
            if self._bound_reached():
                self._cursor = None
                self._finish_or_idle()
                return None
            self.state = CollatorState.FETCHING
            return self._cursor

    def _on_page(self, page: Page):
        if self.cancelled:
            logger.debug("dropping page at offset=%d fetched after cancellation", page.offset)
            return
        # flatten the whole page before buffering: a failure here leaves nothing half-queued
        docs = flatten_page(page.questions, self.location_prefix)
        with self._lock:
            if self.cancelled:
                logger.debug("dropping page at offset=%d fetched after cancellation", page.offset)
                return
            self.pages_fetched += 1
            self._cursor = page.next_cursor
            if self._bound_reached():
                self._cursor = None
            if docs:
                self._buffer.extend(docs)
                self.state = CollatorState.DRAINING
            else:
                self._finish_or_idle()

    def _on_error(self, e: BaseException):
        with self._lock:
            if self.cancelled:
                return
            self._buffer.clear()
            self.error = e
            self.state = CollatorState.FAILED
        logger.warning("collation failed after %d pages / %d documents: %s",
                       self.pages_fetched, self.documents_yielded, e)

    def _finish_or_idle(self):
        if self._cursor is None:
            self.state = CollatorState.DONE
            logger.info("collated %d documents from %d pages", self.documents_yielded, self.pages_fetched)
        else:
            self.state = CollatorState.IDLE

    def _take(self) -> Optional[Document]:
        with self._lock:
            if self.cancelled or not self._buffer:
                return None
            doc = self._buffer.popleft()
            self.documents_yielded += 1
            if not self._buffer:
                self._finish_or_idle()
            return doc

    def _cancel(self):
        with self._lock:
            if self._terminal():
                return
            self.cancelled = True
            self._buffer.clear()
            self._cursor = None
            self.state = CollatorState.DONE
        logger.info("collation cancelled after %d documents", self.documents_yielded)


class QetaCollator(_CollatorCore):
    """Synchronous document stream backed by QetaFetcher (requests)."""

    def __init__(self, fetcher: QetaFetcher, location_prefix: str = DEFAULT_PREFIX,
                 max_pages: Optional[int] = None):
        super().__init__(location_prefix, max_pages)
        self.fetcher = fetcher

    def __iter__(self):
        return self

    def __next__(self) -> Document:
        while True:
            if self.state is CollatorState.FAILED:
                raise self.error
            if self.state is CollatorState.DONE:
                self.fetcher.close()
                raise StopIteration
            doc = self._take()
            if doc is not None:
                return doc
            self._fetch()

    def _fetch(self):
        cursor = self._begin_fetch()
        if cursor is None:
            return
        try:
            page = self.fetcher.fetch_page(cursor)
            self._on_page(page)
        except Exception as e:
            self._on_error(e)
            if self.state is CollatorState.FAILED:
                self.fetcher.close()

    def close(self):
        """Stop the run. Safe to call from another thread while a fetch is outstanding."""
        self._cancel()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        self.fetcher.close()


class AsyncQetaCollator(_CollatorCore):
    """Async document stream backed by AsyncQetaFetcher (aiohttp)."""

    def __init__(self, fetcher: AsyncQetaFetcher, location_prefix: str = DEFAULT_PREFIX,
                 max_pages: Optional[int] = None):
        super().__init__(location_prefix, max_pages)
        self.fetcher = fetcher

    def __aiter__(self):
        return self

    async def __anext__(self) -> Document:
        while True:
            if self.state is CollatorState.FAILED:
                await self.fetcher.close()
                raise self.error
            if self.state is CollatorState.DONE:
                await self.fetcher.close()
                raise StopAsyncIteration
            doc = self._take()
            if doc is not None:
                return doc
            await self._fetch()

    async def _fetch(self):
        cursor = self._begin_fetch()
        if cursor is None:
            return
        try:
            page = await self.fetcher.fetch_page(cursor)
            self._on_page(page)
        except asyncio.CancelledError:
            self._cancel()
            raise
        except Exception as e:
            self._on_error(e)

    async def aclose(self):
        self._cancel()
        await self.fetcher.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
