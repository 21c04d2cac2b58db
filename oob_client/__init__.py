"""Client for interactsh-style out-of-band interaction servers."""

from .client import Client
from .config import Settings
from .decoder import CallbackHandler, InteractionDecoder, InteractionHandler
from .errors import (
    ConfigurationError,
    CryptoError,
    NetworkError,
    OOBClientError,
    PollingError,
    ProtocolError,
)
from .identifiers import PROCESS_COUNTER, AtomicCounter, IdentifierGenerator
from .keypair import KeyPair, seal
from .models import DeregisterRequest, Interaction, PollResponse, RegisterRequest
from .polling import PollingScheduler, PollState

__version__ = "0.1.0"

__all__ = [
    "Client",
    "Settings",
    "CallbackHandler",
    "InteractionDecoder",
    "InteractionHandler",
    "ConfigurationError",
    "CryptoError",
    "NetworkError",
    "OOBClientError",
    "PollingError",
    "ProtocolError",
    "PROCESS_COUNTER",
    "AtomicCounter",
    "IdentifierGenerator",
    "KeyPair",
    "seal",
    "DeregisterRequest",
    "Interaction",
    "PollResponse",
    "RegisterRequest",
    "PollingScheduler",
    "PollState",
]
