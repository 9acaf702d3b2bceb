import os
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

from qa2index.crawl.errors import ConfigError

load_dotenv()

DEFAULT_USER_AGENT = "qa2index-collator/0.1"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _env_opt(name: str) -> Optional[str]:
    raw = (os.getenv(name) or "").strip()
    return raw or None


@dataclass
class Settings:
    QETA_PLUGIN_ID: str = field(default_factory=lambda: os.getenv("QETA_PLUGIN_ID", "qeta"))
    QETA_BASE_URL: Optional[str] = field(default_factory=lambda: _env_opt("QETA_BASE_URL"))
    BACKEND_BASE_URL: Optional[str] = field(default_factory=lambda: _env_opt("BACKEND_BASE_URL"))
    QETA_TOKEN: Optional[str] = field(default_factory=lambda: _env_opt("QETA_TOKEN"))

    # Crawling defaults
    QETA_PAGE_SIZE: int = field(default_factory=lambda: _env_int("QETA_PAGE_SIZE", 50))
    QETA_TIMEOUT: int = field(default_factory=lambda: _env_int("QETA_TIMEOUT", 30))
    QETA_LOCATION_PREFIX: str = field(default_factory=lambda: os.getenv("QETA_LOCATION_PREFIX", "/qeta"))
    QETA_USER_AGENT: str = field(default_factory=lambda: os.getenv("QETA_USER_AGENT", DEFAULT_USER_AGENT))

    def __post_init__(self):
        if self.QETA_PAGE_SIZE <= 0:
            raise ConfigError(f"QETA_PAGE_SIZE must be positive, got {self.QETA_PAGE_SIZE}")
        if self.QETA_TIMEOUT <= 0:
            raise ConfigError(f"QETA_TIMEOUT must be positive, got {self.QETA_TIMEOUT}")
        self.QETA_LOCATION_PREFIX = self.QETA_LOCATION_PREFIX.rstrip("/")

    @classmethod
    def from_env(cls) -> "Settings":
        """Re-read the environment (tests and the CLI build their own)."""
        return cls()

