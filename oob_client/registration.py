from __future__ import annotations
import logging
from dataclasses import dataclass

import httpx
from pydantic import BaseModel, ValidationError
from yarl import URL

from .errors import NetworkError, ProtocolError
from .models import DeregisterRequest, PollResponse, RegisterRequest

log = logging.getLogger(__name__)

_JSON = {"Content-Type": "application/json"}


@dataclass
class RegistrationService:
    """Register, poll and deregister calls against the collaboration server.

    Every call is a single request; retries are the transport's business.
    """

    base: URL
    client: httpx.AsyncClient

    async def register(self, public_key: bytes, secret_key: str, correlation_id: str) -> None:
        body = RegisterRequest(public_key=public_key, secret_key=secret_key, correlation_id=correlation_id)
        await self._post("/register", body, "register")
        log.info("registered correlation id %s with %s", correlation_id, self.base)

    async def deregister(self, correlation_id: str) -> None:
        await self._post("/deregister", DeregisterRequest(correlation_id=correlation_id), "deregister")
        log.info("deregistered correlation id %s", correlation_id)

    async def poll(self, correlation_id: str, secret_key: str) -> PollResponse:
        url = str(self.base / "poll")
        try:
            r = await self.client.get(url, params={"id": correlation_id, "secret": secret_key})
        except httpx.HTTPError as exc:
            raise NetworkError(f"could not make poll request: {exc}") from exc
        if r.status_code != 200:
            raise NetworkError(f"could not poll server (status {r.status_code})", r.status_code)
        try:
            return PollResponse.model_validate_json(r.content)
        except ValidationError as exc:
            raise ProtocolError(f"could not decode poll response: {exc}") from exc

    async def _post(self, path: str, body: BaseModel, action: str) -> None:
        url = str(self.base / path.lstrip("/"))
        data = body.model_dump_json(by_alias=True)
        try:
            r = await self.client.post(url, content=data, headers=_JSON)
        except httpx.HTTPError as exc:
            raise NetworkError(f"could not make {action} request: {exc}") from exc
        if r.status_code != 200:
            raise NetworkError(f"could not {action} to server (status {r.status_code})", r.status_code)
