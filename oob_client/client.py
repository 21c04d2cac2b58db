"""
The OOB client: identity, registration, identifiers and polling.

Use ``await Client.create(...)``; it only returns a client whose keypair
exists and whose registration the server accepted.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Callable

import httpx
from yarl import URL

from .config import Settings
from .decoder import InteractionDecoder, InteractionHandler
from .errors import ConfigurationError
from .http_client import build_http_client
from .identifiers import AtomicCounter, IdentifierGenerator
from .keypair import KeyPair
from .polling import PollingScheduler, Sleep
from .registration import RegistrationService

log = logging.getLogger(__name__)


def parse_server_url(raw: str) -> URL:
    """Validate the collaboration server address."""
    try:
        url = URL(raw.strip())
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"could not parse server URL {raw!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.raw_host:
        raise ConfigurationError(f"server URL must be an absolute http(s) URL, got {raw!r}")
    return url.with_query(None).with_fragment(None)


def server_host(url: URL) -> str:
    host = url.raw_host or ""
    if ":" in host:
        host = f"[{host}]"
    if not url.is_default_port() and url.port is not None:
        host = f"{host}:{url.port}"
    return host


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:20]


class Client:
    def __init__(
        self,
        *,
        server_url: URL,
        correlation_id: str,
        secret_key: str,
        keypair: KeyPair,
        http: httpx.AsyncClient,
        persistent_session: bool = False,
        counter: AtomicCounter | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Sleep = asyncio.sleep,
    ):
        self._server_url = server_url
        self._correlation_id = correlation_id
        self._secret_key = secret_key
        self._keypair = keypair
        self._http = http
        self._persistent_session = persistent_session
        self._closed = False
        self._registration = RegistrationService(base=server_url, client=http)
        self.identifiers = IdentifierGenerator(correlation_id, server_host(server_url), counter=counter, clock=clock)
        self._scheduler = PollingScheduler(self._fetch, InteractionDecoder(keypair), sleep=sleep)

    @classmethod
    async def create(
        cls,
        server_url: str | None = None,
        *,
        persistent_session: bool | None = None,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        counter: AtomicCounter | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Sleep = asyncio.sleep,
    ) -> Client:
        """Generate a keypair and register it with the server.

        Raises ``ConfigurationError``, ``CryptoError`` or ``NetworkError``;
        nothing is left open when it does.
        """
        settings = settings or Settings()
        base = parse_server_url(server_url or settings.SERVER_URL)
        if persistent_session is None:
            persistent_session = settings.PERSISTENT_SESSION

        keypair = KeyPair.generate()
        public_key = keypair.export_public_key()

        http = build_http_client(settings, transport)
        client = cls(
            server_url=base,
            correlation_id=new_correlation_id(),
            secret_key=str(uuid.uuid4()),
            keypair=keypair,
            http=http,
            persistent_session=persistent_session,
            counter=counter,
            clock=clock,
            sleep=sleep,
        )
        try:
            await client._registration.register(public_key, client.secret_key, client.correlation_id)
        except BaseException:
            await http.aclose()
            raise
        return client

    @property
    def correlation_id(self) -> str:
        return self._correlation_id

    @property
    def secret_key(self) -> str:
        return self._secret_key

    @property
    def server_url(self) -> URL:
        return self._server_url

    @property
    def persistent_session(self) -> bool:
        return self._persistent_session

    @property
    def public_key(self) -> bytes:
        return self._keypair.export_public_key()

    @property
    def polling(self) -> bool:
        return self._scheduler.running

    @property
    def closed(self) -> bool:
        return self._closed

    def url(self) -> str:
        """Mint a fresh identifier to embed in a probe."""
        return self.identifiers.next()

    async def start_polling(self, interval: float, handler: InteractionHandler) -> None:
        self._scheduler.start(interval, handler)

    async def stop_polling(self) -> None:
        await self._scheduler.stop()

    async def poll_once(self, handler: InteractionHandler) -> int:
        return await self._scheduler.poll_once(handler)

    async def close(self) -> None:
        """Stop polling and deregister unless the session is persistent.

        Deregistration is attempted once; its failure is raised but the
        client still ends up closed.
        """
        if self._closed:
            return
        self._closed = True
        try:
            await self._scheduler.stop()
            if self._persistent_session:
                log.info("keeping persistent session %s registered", self._correlation_id)
            else:
                await self._registration.deregister(self._correlation_id)
        finally:
            await self._http.aclose()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def _fetch(self):
        return await self._registration.poll(self._correlation_id, self._secret_key)

    def __repr__(self) -> str:
        return f"Client(server={self._server_url!s}, correlation_id={self._correlation_id!r})"
