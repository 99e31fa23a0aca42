from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from .utils import getenv_str, truthy

DOMAIN_ROOT = "https://www.sdu.dk"
OPEN_POSITIONS = "https://www.sdu.dk/en/service/ledige_stillinger"
MEMORY_FILE_LOCATION = ".memory"
WEBDRIVER_URL = "http://localhost:9515"
TABLE_SELECTOR = "tbody.list"

OUTPUT_FORMATS = ("rss", "text")


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env cannot form a valid Settings."""


# -----------------------------
# Models
# -----------------------------
@dataclass(frozen=True)
class Settings:
    """
    Canonical configuration for an 'sdu_positions' run.

    The parser and dedupe pass take what they need from here as arguments;
    nothing below is read from module globals at parse time.
    """

    # Site
    domain_root: str = DOMAIN_ROOT
    listings_url: str = OPEN_POSITIONS

    # First-seen memory (relative paths resolve against the working directory)
    memory_path: str = MEMORY_FILE_LOCATION

    # Browser (ChromeDriver speaking WebDriver)
    webdriver_url: str = WEBDRIVER_URL
    chrome_binary: str | None = None
    table_selector: str = TABLE_SELECTOR
    render_wait_seconds: float = 5.0
    request_timeout: float = 30.0
    skip_network: bool = False

    # Output
    output: str = "rss"
    webmaster: str | None = None

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None = None) -> Settings:
        """
        Build Settings from kwargs with env fallbacks and validation.

        Expected kwargs (all optional):

            domain_root: str = "https://www.sdu.dk"
            listings_url: str = "https://www.sdu.dk/en/service/ledige_stillinger"
            memory_path: str = ".memory"                 # env SDU_MEMORY_PATH
            webdriver_url: str = "http://localhost:9515"  # env WEBDRIVER_URL
            chrome_binary: str                           # env CHROME_BINARY
            table_selector: str = "tbody.list"
            render_wait_seconds: float = 5.0
            request_timeout: float = 30.0
            skip_network: bool = false
            output: "rss" | "text" = "rss"
            webmaster: str                               # env SDU_FEED_WEBMASTER
        """
        kw = dict(kwargs or {})

        def _str(key: str, env: str | None, default: str | None) -> str | None:
            val = kw.get(key)
            if val is not None and str(val).strip():
                return str(val).strip()
            if env:
                return getenv_str(env, default)
            return default

        try:
            render_wait_seconds = float(kw.get("render_wait_seconds", 5.0))
            request_timeout = float(kw.get("request_timeout", 30.0))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid number in settings: {e}") from e

        settings = cls(
            domain_root=_str("domain_root", None, DOMAIN_ROOT) or "",
            listings_url=_str("listings_url", None, OPEN_POSITIONS) or "",
            memory_path=_str("memory_path", "SDU_MEMORY_PATH", MEMORY_FILE_LOCATION) or "",
            webdriver_url=_str("webdriver_url", "WEBDRIVER_URL", WEBDRIVER_URL) or "",
            chrome_binary=_str("chrome_binary", "CHROME_BINARY", None),
            table_selector=_str("table_selector", None, TABLE_SELECTOR) or "",
            render_wait_seconds=render_wait_seconds,
            request_timeout=request_timeout,
            skip_network=truthy(kw.get("skip_network")),
            output=(_str("output", None, "rss") or "").lower(),
            webmaster=_str("webmaster", "SDU_FEED_WEBMASTER", None),
        )
        _validate_settings(settings)
        return settings


# -----------------------------
# Helpers
# -----------------------------
def _is_http_url(url: str) -> bool:
    parts = urlsplit(url)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def _validate_settings(s: Settings) -> None:
    for name in ("domain_root", "listings_url", "webdriver_url"):
        if not _is_http_url(getattr(s, name)):
            raise ConfigError(f"'{name}' must be an http(s) URL (got {getattr(s, name)!r}).")
    if not s.memory_path.strip():
        raise ConfigError("'memory_path' cannot be empty.")
    if not s.table_selector.strip():
        raise ConfigError("'table_selector' cannot be empty.")
    if s.render_wait_seconds < 0:
        raise ConfigError("'render_wait_seconds' must be >= 0.")
    if s.request_timeout <= 0:
        raise ConfigError("'request_timeout' must be > 0.")
    if s.output not in OUTPUT_FORMATS:
        raise ConfigError(f"'output' must be one of {', '.join(OUTPUT_FORMATS)} (got {s.output!r}).")
