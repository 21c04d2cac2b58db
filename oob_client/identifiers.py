"""Unique probe identifiers bound to a client's correlation id.

An identifier is ``correlation_id + zbase32(be32(seconds) || be32(counter))``
followed by ``"." + server_host``. The counter is shared by every generator
in the process unless one is injected, so two calls can never produce the
same suffix within the same second.
"""

from __future__ import annotations

import base64
import struct
import threading
import time
from typing import Callable

_B32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
ZBASE32_ALPHABET = "ybndrfg8ejkmcpqxot1uwisza345h769"
_TO_ZBASE32 = str.maketrans(_B32_ALPHABET, ZBASE32_ALPHABET)

_UINT32_MASK = 0xFFFFFFFF


def zbase32_encode(data: bytes) -> str:
    """Encode ``data`` as unpadded, lowercase z-base-32."""
    return base64.b32encode(data).decode("ascii").rstrip("=").translate(_TO_ZBASE32)


class AtomicCounter:
    """Thread-safe 32-bit counter; ``increment`` returns the new value."""

    def __init__(self, start: int = 0) -> None:
        self._value = start & _UINT32_MASK
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value = (self._value + 1) & _UINT32_MASK
            return self._value

    @property
    def value(self) -> int:
        return self._value

    def reset(self, value: int = 0) -> None:
        with self._lock:
            self._value = value & _UINT32_MASK


PROCESS_COUNTER = AtomicCounter()


class IdentifierGenerator:
    def __init__(
        self,
        correlation_id: str,
        server_host: str,
        counter: AtomicCounter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.correlation_id = correlation_id
        self.server_host = server_host
        self._counter = counter if counter is not None else PROCESS_COUNTER
        self._clock = clock

    def next(self) -> str:
        seq = self._counter.increment()
        raw = struct.pack(">II", int(self._clock()) & _UINT32_MASK, seq)
        return f"{self.correlation_id}{zbase32_encode(raw)}.{self.server_host}"



__all__ = ["AtomicCounter", "IdentifierGenerator", "PROCESS_COUNTER", "ZBASE32_ALPHABET", "zbase32_encode"]
