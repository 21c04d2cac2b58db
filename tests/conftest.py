"""Shared fixtures: an in-memory collaboration server and a manual poll timer.

Requires: pip install pytest-asyncio
"""
from __future__ import annotations

import asyncio
import base64
import json
from collections import deque

import httpx
import pytest

from oob_client.client import Client
from oob_client.config import Settings
from oob_client.identifiers import AtomicCounter
from oob_client.keypair import seal


SERVER_URL = "https://oob.example.test"


class FakeServer:
    """Minimal interactsh-style server behind ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status = {"/register": 200, "/deregister": 200, "/poll": 200}
        self.public_key: bytes | None = None
        self.secret_key: str | None = None
        self.correlation_id: str | None = None
        self.pending: list[str] = []
        self.redeliver = False
        self.poll_body: bytes | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        status = self.status.get(path, 404)
        if status != 200:
            return httpx.Response(status, json={"error": "nope"})
        if path == "/register":
            body = json.loads(request.content)
            self.public_key = base64.b64decode(body["public-key"])
            self.secret_key = body["secret-key"]
            self.correlation_id = body["correlation-id"]
            return httpx.Response(200, json={"message": "registration successful"})
        if path == "/deregister":
            return httpx.Response(200, json={"message": "deregistration successful"})
        if self.poll_body is not None:
            return httpx.Response(200, content=self.poll_body)
        data = list(self.pending)
        if not self.redeliver:
            self.pending.clear()
        return httpx.Response(200, json={"data": data})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def deliver(self, payload: dict) -> None:
        assert self.public_key is not None, "client never registered"
        blob = seal(self.public_key, json.dumps(payload).encode())
        self.pending.append(base64.b64encode(blob).decode())

    def deliver_raw(self, blob: bytes) -> None:
        self.pending.append(base64.b64encode(blob).decode())


class ManualTicker:
    """Stand-in for ``asyncio.sleep`` that only returns when told to."""

    def __init__(self) -> None:
        self._waiters: deque[asyncio.Future] = deque()
        self.sleeps = 0

    async def sleep(self, interval: float) -> None:
        fut = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        self.sleeps += 1
        await fut

    async def wait_sleeping(self, spins: int = 1000) -> None:
        for _ in range(spins):
            if any(not f.done() for f in self._waiters):
                return
            await asyncio.sleep(0)
        raise AssertionError("poll loop never went back to sleep")

    async def tick(self, n: int = 1) -> None:
        """Release ``n`` timer waits, each time waiting for the tick to finish."""
        for _ in range(n):
            await self.wait_sleeping()
            while self._waiters:
                fut = self._waiters.popleft()
                if not fut.done():
                    fut.set_result(None)
                    break
            await self.wait_sleeping()

    async def spin(self, n: int = 50) -> None:
        """Release anything waiting and let the loop run for a while."""
        for _ in range(n):
            while self._waiters:
                fut = self._waiters.popleft()
                if not fut.done():
                    fut.set_result(None)
            await asyncio.sleep(0)


class RecordingHandler:
    def __init__(self) -> None:
        self.seen = []

    def on_interaction(self, interaction) -> None:
        self.seen.append(interaction)


def interaction_payload(unique_id: str, protocol: str = "dns") -> dict:
    return {
        "protocol": protocol,
        "unique-id": unique_id,
        "full-id": unique_id,
        "q-type": "A",
        "raw-request": f"query for {unique_id}",
        "remote-address": "198.51.100.7",
        "timestamp": "2024-05-01T12:00:00Z",
    }


async def make_client(server: FakeServer, **kwargs) -> Client:
    kwargs.setdefault("settings", Settings(SERVER_URL=SERVER_URL))
    kwargs.setdefault("counter", AtomicCounter())
    return await Client.create(SERVER_URL, transport=server.transport(), **kwargs)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()
