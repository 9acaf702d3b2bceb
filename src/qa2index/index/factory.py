from __future__ import annotations
import logging
from typing import Optional

import requests

from qa2index.crawl.auth import Authenticator, CredentialProvider, StaticTokenProvider
from qa2index.crawl.base import AsyncQetaFetcher
from qa2index.crawl.discovery import ServiceDiscovery, discovery_from_settings
from qa2index.crawl.errors import DiscoveryError
from qa2index.crawl.qeta_requests import QetaFetcher
from qa2index.index.collator import AsyncQetaCollator, QetaCollator
from qa2index.utils.config import Settings

logger = logging.getLogger(__name__)


class DefaultQetaCollatorFactory:
    """Builds one independent collator per indexing run."""

    type = "qeta"
    visibility_permission = "qeta.read"

    def __init__(
        self,
        settings: Settings,
        discovery: ServiceDiscovery,
        token_provider: Optional[CredentialProvider] = None,
        max_pages: Optional[int] = None,
        session_factory=requests.Session,
    ):
        self.settings = settings
        self.discovery = discovery
        self.authenticator = Authenticator(token_provider)
        self.max_pages = max_pages
        self.session_factory = session_factory

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        discovery: Optional[ServiceDiscovery] = None,
        token_provider: Optional[CredentialProvider] = None,
        **kwargs,
    ) -> "DefaultQetaCollatorFactory":
        if discovery is None:
            discovery = discovery_from_settings(settings)
        if token_provider is None and settings.QETA_TOKEN:
            token_provider = StaticTokenProvider(settings.QETA_TOKEN)
        return cls(settings, discovery, token_provider=token_provider, **kwargs)

    def _base_url(self) -> str:
        plugin_id = self.settings.QETA_PLUGIN_ID
        try:
            base_url = self.discovery.get_base_url(plugin_id)
        except DiscoveryError:
            raise
        except Exception as e:
            raise DiscoveryError(f"could not resolve base URL for {plugin_id!r}: {e}") from e
        logger.debug("resolved %s -> %s (auth=%s)", plugin_id, base_url, self.authenticator.enabled)
        return base_url

    def get_collator(self) -> QetaCollator:
        fetcher = QetaFetcher(
            self._base_url(),
            authenticator=self.authenticator,
            page_size=self.settings.QETA_PAGE_SIZE,
            timeout=self.settings.QETA_TIMEOUT,
            user_agent=self.settings.QETA_USER_AGENT,
            session=self.session_factory(),
            close_session=True,
        )
        return QetaCollator(fetcher, location_prefix=self.settings.QETA_LOCATION_PREFIX,
                            max_pages=self.max_pages)

    def get_async_collator(self) -> AsyncQetaCollator:
        fetcher = AsyncQetaFetcher(
            self._base_url(),
            authenticator=self.authenticator,
            page_size=self.settings.QETA_PAGE_SIZE,
            timeout=self.settings.QETA_TIMEOUT,
            user_agent=self.settings.QETA_USER_AGENT,
        )
        return AsyncQetaCollator(fetcher, location_prefix=self.settings.QETA_LOCATION_PREFIX,
                                 max_pages=self.max_pages)
