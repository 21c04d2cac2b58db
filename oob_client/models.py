"""Wire models exchanged with the collaboration server.

Keys use the server's kebab-case names; Python attributes are snake_case.
Byte fields travel as standard base64 strings.
"""

from __future__ import annotations

import base64
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    public_key: bytes = Field(alias="public-key")
    secret_key: str = Field(alias="secret-key")
    correlation_id: str = Field(alias="correlation-id")

    @field_serializer("public_key", when_used="json")
    def _b64(self, v: bytes) -> str:
        return base64.b64encode(v).decode("ascii")


class DeregisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    correlation_id: str = Field(alias="correlation-id")


class PollResponse(BaseModel):
    """One batch of encrypted interactions, in server order."""

    data: List[str] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _null_is_empty(cls, v):
        return [] if v is None else v


class Interaction(BaseModel):
    """A captured OOB event. Unknown server fields are kept as extras."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    protocol: Optional[str] = None
    unique_id: Optional[str] = Field(default=None, alias="unique-id")
    full_id: Optional[str] = Field(default=None, alias="full-id")
    q_type: Optional[str] = Field(default=None, alias="q-type")
    raw_request: Optional[str] = Field(default=None, alias="raw-request")
    raw_response: Optional[str] = Field(default=None, alias="raw-response")
    smtp_from: Optional[str] = Field(default=None, alias="smtp-from")
    remote_address: Optional[str] = Field(default=None, alias="remote-address")
    timestamp: Optional[datetime] = None


__all__ = ["RegisterRequest", "DeregisterRequest", "PollResponse", "Interaction"]
