from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from pydantic import ValidationError

from .errors import CryptoError
from .keypair import KeyPair
from .models import Interaction, PollResponse

log = logging.getLogger(__name__)


@runtime_checkable
class InteractionHandler(Protocol):
    def on_interaction(self, interaction: Interaction) -> None: ...


@dataclass
class CallbackHandler:
    """Adapt a plain function to ``InteractionHandler``."""

    callback: Callable[[Interaction], None]

    def on_interaction(self, interaction: Interaction) -> None:
        self.callback(interaction)


class InteractionDecoder:
    """Decrypt and parse a poll batch, one blob at a time.

    A blob that fails to decode, decrypt or parse is skipped; the rest of
    the batch is still delivered, in server order.
    """

    def __init__(self, keypair: KeyPair):
        self.keypair = keypair

    def decode(self, response: PollResponse, handler: InteractionHandler) -> int:
        delivered = 0
        for index, blob in enumerate(response.data):
            interaction = self._decode_one(index, blob)
            if interaction is None:
                continue
            try:
                handler.on_interaction(interaction)
            except Exception:
                log.exception("interaction handler failed on item %d", index)
                continue
            delivered += 1
        return delivered

    def _decode_one(self, index: int, blob: str) -> Interaction | None:
        try:
            ciphertext = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError):
            log.debug("skipping item %d: not base64", index)
            return None
        try:
            plaintext = self.keypair.decrypt(ciphertext)
        except CryptoError:
            log.debug("skipping item %d: decryption failed", index)
            return None
        try:
            return Interaction.model_validate_json(plaintext)
        except ValidationError:
            log.debug("skipping item %d: not an interaction record", index)
            return None
