"""
HTTP client utilities for jXSS.

Provides the rotating client pool (direct, HTTP(S) or SOCKS5 proxied),
request helpers and query-string injection.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse, parse_qsl, urlencode, urlunparse

import httpx

from jxss.errors import ConfigError, FetchError, ParseError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
PROXY_SCHEMES = {"http", "https", "socks5", "socks5h"}


@dataclass(frozen=True)
class ClientHandle:
    """A configured async client and the proxy it goes through (None = direct)."""
    client: httpx.AsyncClient
    proxy: str | None = None


class ClientProvider:
    """Round-robin pool of HTTP clients, one per configured proxy."""

    def __init__(
        self,
        proxies: list[str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        headers: dict[str, str] | None = None,
        logger: logging.Logger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.headers = headers or {}
        self.logger = logger or logging.getLogger(__name__)
        self._transport = transport
        self._lock = threading.Lock()
        self._current = 0

        self._direct = ClientHandle(self._create_client(None))
        self._handles = [self._create_handle(p) for p in (proxies or [])]

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _create_client(self, proxy: str | None) -> httpx.AsyncClient:
        default_headers = {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }
        default_headers.update(self.headers)

        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            verify=self.verify_ssl,
            proxy=proxy,
            headers=default_headers,
            transport=self._transport,
        )

    def _create_handle(self, proxy: str) -> ClientHandle:
        """Build a proxied handle, falling back to direct if the proxy is unusable."""
        proxy = proxy.strip()
        if not proxy:
            return self._direct

        try:
            scheme = urlparse(proxy).scheme.lower()
            if scheme not in PROXY_SCHEMES:
                raise ValueError(f"unsupported proxy scheme {scheme!r}")
            return ClientHandle(self._create_client(proxy), proxy)
        except (ValueError, ImportError, httpx.InvalidURL) as e:
            self.logger.warning(
                "Proxy %s unusable, falling back to direct connection: %s", proxy, e,
                extra={"proxy": proxy, "error": str(e)},
            )
            return self._direct

    def next(self) -> ClientHandle:
        """Return the next handle in round-robin order."""
        if not self._handles:
            return self._direct
        with self._lock:
            handle = self._handles[self._current]
            self._current = (self._current + 1) % len(self._handles)
        return handle

    async def close(self):
        """Close every client in the pool."""
        seen = set()
        for handle in [self._direct, *self._handles]:
            if id(handle.client) in seen:
                continue
            seen.add(id(handle.client))
            await handle.client.aclose()


async def fetch_body(handle: ClientHandle, url: str) -> str:
    """GET a URL and return its body, whatever the status code."""
    try:
        response = await handle.client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchError(url, str(e) or e.__class__.__name__) from e
    return response.text


def build_injected_url(url: str, key: str, value: str) -> str:
    """
    Set a query parameter on a URL.

    The key is lowercased, any existing values for it are replaced, and the
    query is re-encoded sorted by key.
    """
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ParseError(f"cannot parse {url!r}: {e}") from e

    params: dict[str, list[str]] = {}
    for k, v in parse_qsl(parsed.query, keep_blank_values=True):
        params.setdefault(k, []).append(v)
    params[key.lower()] = [value]

    query = urlencode([(k, v) for k in sorted(params) for v in params[k]])
    return urlunparse(parsed._replace(query=query))


def read_urls(filepath: str | Path) -> list[str]:
    """Read target URLs (one per line), skipping blanks, comments and duplicates."""
    filepath = Path(filepath)
    try:
        with open(filepath, encoding="utf-8") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read URL list {filepath}: {e}") from e

    urls = []
    seen = set()
    for line in lines:
        line = line.strip()
        if not line or line in seen:
            continue
        if line.startswith("#"):
            logger.debug("Skipping comment line in %s: %s", filepath, line)
            continue
        seen.add(line)
        urls.append(line)
    return urls
