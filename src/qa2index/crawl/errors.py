from typing import Optional


class Qa2IndexError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigError(Qa2IndexError):
    pass


class DiscoveryError(Qa2IndexError):
    pass


class FetchError(Qa2IndexError):
    """A page could not be fetched. Terminal for the collator run."""


class TransportError(FetchError):
    pass


class UpstreamStatusError(FetchError):
    def __init__(self, message: str, status: int, url: str = "", body: str = ""):
        super().__init__(message)
        self.status = status
        self.url = url
        self.body = body


class MalformedPayloadError(FetchError):
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class CredentialError(FetchError):
    pass
