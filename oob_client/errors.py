"""Exception hierarchy for the OOB client.

Construction-time failures (configuration, crypto, registration) abort
client creation. Poll-time failures are caught by the scheduler and never
reach the caller. Deregistration failures are raised from ``close()``.
"""

from __future__ import annotations


class OOBClientError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(OOBClientError):
    """The server address or another setting is unusable."""


class CryptoError(OOBClientError):
    """Keypair generation, export or decryption failed."""


class NetworkError(OOBClientError):
    """Transport failure or a non-success HTTP status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(OOBClientError):
    """The server answered with a body that could not be decoded."""


class PollingError(OOBClientError):
    """The polling scheduler was driven through an invalid transition."""


__all__ = [
    "OOBClientError",
    "ConfigurationError",
    "CryptoError",
    "NetworkError",
    "ProtocolError",
    "PollingError",
]
