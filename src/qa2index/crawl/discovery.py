from __future__ import annotations
from typing import Dict, Optional, Protocol

from qa2index.crawl.errors import ConfigError, DiscoveryError


class ServiceDiscovery(Protocol):
    def get_base_url(self, plugin_id: str) -> str: ...


class StaticDiscovery:
    """Explicit plugin id -> base URL mapping."""

    def __init__(self, urls: Dict[str, str]):
        self.urls = {k: v.rstrip("/") for k, v in urls.items()}

    def get_base_url(self, plugin_id: str) -> str:
        try:
            return self.urls[plugin_id]
        except KeyError:
            raise DiscoveryError(f"no base URL registered for plugin {plugin_id!r}") from None


class BackendDiscovery:
    """Plugins mounted under one backend at <backend>/api/<plugin_id>."""

    def __init__(self, backend_base_url: str):
        if not backend_base_url:
            raise DiscoveryError("backend base URL is empty")
        self.backend_base_url = backend_base_url.rstrip("/")

    def get_base_url(self, plugin_id: str) -> str:
        return f"{self.backend_base_url}/api/{plugin_id}"


def discovery_from_settings(settings, base_url: Optional[str] = None, backend_url: Optional[str] = None) -> ServiceDiscovery:
    base_url = base_url or settings.QETA_BASE_URL
    backend_url = backend_url or settings.BACKEND_BASE_URL
    if base_url:
        return StaticDiscovery({settings.QETA_PLUGIN_ID: base_url})
    if backend_url:
        return BackendDiscovery(backend_url)
    raise ConfigError("set QETA_BASE_URL or BACKEND_BASE_URL")
