import logging
import requests
from requests import HTTPError, RequestException
from requests.auth import AuthBase

from typing import Dict, Optional
from qa2index.crawl.auth import Authenticator
from qa2index.crawl.errors import MalformedPayloadError, TransportError, UpstreamStatusError
from qa2index.crawl.paging import page_params, to_page
from qa2index.ingest.models import Page
from qa2index.utils.config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


class _HeadersOnly(AuthBase):
    """Explicit request auth so requests never fills in ~/.netrc credentials.

    The Authorization header, if any, is already set from the Authenticator.
    """
    def __call__(self, r):
        return r


class QetaFetcher:
    """Fetches one page of questions per call from <base>/questions."""

    def __init__(
        self,
        base_url: str,
        authenticator: Optional[Authenticator] = None,
        page_size: int = 50,
        timeout: int = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
        close_session: Optional[bool] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.authenticator = authenticator or Authenticator()
        self.page_size = page_size
        self.timeout = timeout
        self.user_agent = user_agent
        self._owns_session = session is None if close_session is None else close_session
        self.session = session or requests.Session()

    @property
    def questions_url(self) -> str:
        return f"{self.base_url}/questions"

    def _headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent, **self.authenticator.headers()}

    def fetch_page(self, cursor: int = 0) -> Page:
        # credential first: a failing provider must not turn into an anonymous request
        headers = self._headers()
        params = page_params(cursor, self.page_size)
        url = self.questions_url
        try:
            r = self.session.get(url, params=params, headers=headers, auth=_HeadersOnly(), timeout=self.timeout)
        except RequestException as e:
            raise TransportError(f"{e} :: url={url}") from e
        try:
            r.raise_for_status()
        except HTTPError as e:
            # include body text for debugging
            body = (r.text or "")[:300]
            msg = f"{e} :: url={r.url} :: body={body}..."
            raise UpstreamStatusError(msg, status=r.status_code, url=r.url, body=body) from e
        try:
            data = r.json()
        except ValueError as e:
            raise MalformedPayloadError(f"response is not JSON :: url={r.url}", url=r.url) from e

        page = to_page(data, cursor, self.page_size, url=r.url)
        logger.debug("fetched %d questions at offset=%d from %s (more=%s)",
                     len(page.questions), cursor, url, page.has_more)
        return page

    def close(self):
        if self._owns_session:
            self.session.close()
