from __future__ import annotations
import asyncio
import logging
from typing import Dict, Any, Optional
import aiohttp

from qa2index.crawl.auth import Authenticator
from qa2index.crawl.errors import MalformedPayloadError, TransportError, UpstreamStatusError
from qa2index.crawl.paging import page_params, to_page
from qa2index.ingest.models import Page
from qa2index.utils.config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"User-Agent": DEFAULT_USER_AGENT}


class HttpClient:
    def __init__(self, headers: Optional[Dict[str, str]] = None, timeout: int = 30,
                 session: Optional[aiohttp.ClientSession] = None):
        self.headers = headers or DEFAULT_HEADERS
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    async def __aenter__(self):
        if self.session is None:
            self.session = aiohttp.ClientSession(headers=self.headers, timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    async def get_json(self, url: str, params: Dict[str, Any] | None = None,
                       headers: Dict[str, str] | None = None) -> Any:
        assert self.session, "HttpClient not started"
        try:
            # per request, so an injected session still gets our User-Agent
            headers = {**self.headers, **(headers or {})}
            async with self.session.get(url, params=params, headers=headers) as r:
                if r.status >= 400:
                    body = (await r.text())[:300]
                    raise UpstreamStatusError(
                        f"{r.status} {r.reason} :: url={r.url} :: body={body}...",
                        status=r.status, url=str(r.url), body=body,
                    )
                try:
                    return await r.json(content_type=None)
                except ValueError as e:
                    raise MalformedPayloadError(f"response is not JSON :: url={r.url}", url=str(r.url)) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{e!r} :: url={url}") from e


class AsyncQetaFetcher:
    """aiohttp twin of QetaFetcher. Use as an async context manager."""

    def __init__(
        self,
        base_url: str,
        authenticator: Optional[Authenticator] = None,
        page_size: int = 50,
        timeout: int = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        http: Optional[HttpClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.authenticator = authenticator or Authenticator()
        self.page_size = page_size
        self.http = http or HttpClient(headers={"User-Agent": user_agent}, timeout=timeout)

    @property
    def questions_url(self) -> str:
        return f"{self.base_url}/questions"

    async def __aenter__(self):
        await self.http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        await self.http.close()

    async def fetch_page(self, cursor: int = 0) -> Page:
        if self.http.session is None:
            await self.http.__aenter__()
        headers = await self.authenticator.aheaders()
        url = self.questions_url
        data = await self.http.get_json(url, params=page_params(cursor, self.page_size), headers=headers)
        page = to_page(data, cursor, self.page_size, url=url)
        logger.debug("fetched %d questions at offset=%d from %s (more=%s)",
                     len(page.questions), cursor, url, page.has_more)
        return page
