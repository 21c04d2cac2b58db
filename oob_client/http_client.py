from __future__ import annotations
import logging
import httpx
from yarl import URL

from .config import Settings

log = logging.getLogger(__name__)


class OOBHTTPClient(httpx.AsyncClient):
    """Async HTTP client that stamps a User-Agent and logs each call without its query."""

    def __init__(self, *, settings: Settings, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings

    async def request(self, method: str, url, headers: dict | None = None, **kwargs):  # type: ignore[override]
        headers = dict(headers) if headers else {}
        headers.setdefault("User-Agent", self.settings.USER_AGENT)
        # the poll query carries the secret key
        log.debug("%s %s", method, URL(str(url)).with_query(None))
        resp = await super().request(method, url, headers=headers, **kwargs)
        log.debug("%s %s -> %d", method, URL(str(url)).with_query(None), resp.status_code)
        return resp


def build_http_client(settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> OOBHTTPClient:
    """Build the client used for register, poll and deregister calls.

    Retries are left to the transport; pass ``transport`` to substitute one
    (tests use ``httpx.MockTransport``).
    """
    if transport is None:
        transport = httpx.AsyncHTTPTransport(retries=settings.RETRIES, proxy=settings.PROXY_URL or None)
    return OOBHTTPClient(
        settings=settings,
        transport=transport,
        timeout=httpx.Timeout(settings.TIMEOUT_S),
        limits=httpx.Limits(max_connections=4, max_keepalive_connections=4),
        follow_redirects=False,
    )
