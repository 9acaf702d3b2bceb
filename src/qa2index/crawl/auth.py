from __future__ import annotations
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Union

from qa2index.crawl.errors import CredentialError

logger = logging.getLogger(__name__)


class CredentialProvider(Protocol):
    """Hands out bearer tokens for backend-to-backend calls."""
    def get_token(self) -> Union[str, Awaitable[str]]: ...


class StaticTokenProvider:
    def __init__(self, token: str):
        self.token = token

    def get_token(self) -> str:
        return self.token


class CallableTokenProvider:
    """Wraps a plain function (sync or async) that returns a token."""
    def __init__(self, fn: Callable[[], Any]):
        self.fn = fn

    def get_token(self):
        return self.fn()


def _check_token(token: Any) -> str:
    # providers shaped like {"token": "..."} are accepted too
    if isinstance(token, dict):
        token = token.get("token")
    if not isinstance(token, str) or not token.strip():
        raise CredentialError("credential provider returned an empty token")
    return token.strip()


class Authenticator:
    """Bearer header for upstream requests; a no-op when no provider is configured."""

    def __init__(self, provider: Optional[CredentialProvider] = None):
        self.provider = provider

    @property
    def enabled(self) -> bool:
        return self.provider is not None

    def credential(self) -> Optional[str]:
        if self.provider is None:
            return None
        try:
            token = self.provider.get_token()
        except Exception as e:
            raise CredentialError(f"could not obtain token: {e}") from e
        if inspect.isawaitable(token):
            # close it so the coroutine isn't reported as never awaited
            if hasattr(token, "close"):
                token.close()
            raise CredentialError("provider is async; use acredential()")
        return _check_token(token)

    async def acredential(self) -> Optional[str]:
        if self.provider is None:
            return None
        try:
            token = self.provider.get_token()
            if inspect.isawaitable(token):
                token = await token
        except Exception as e:
            raise CredentialError(f"could not obtain token: {e}") from e
        return _check_token(token)

    def headers(self) -> Dict[str, str]:
        token = self.credential()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def aheaders(self) -> Dict[str, str]:
        token = await self.acredential()
        return {"Authorization": f"Bearer {token}"} if token else {}
