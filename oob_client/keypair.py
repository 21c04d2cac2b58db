"""
Hybrid keypair: X25519 key encapsulation + AES-256-GCM.

A sealed blob is ``ephemeral_public(32) || nonce(12) || ciphertext+tag``.
The AES key is derived with HKDF-SHA256 from the X25519 shared secret.
"""
from __future__ import annotations

import os

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import x25519
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .errors import CryptoError

_HKDF_SALT = b"oob-client-hkdf-v1"
_HKDF_INFO = b"OOB-INTERACTION-V1"
_PUBLIC_LEN = 32
_NONCE_LEN = 12
_TAG_LEN = 16


class KeyPair:
    """Owns the client's private key and decrypts sealed interactions."""

    def __init__(self, private_key: x25519.X25519PrivateKey) -> None:
        self._private_key = private_key

    @classmethod
    def generate(cls) -> KeyPair:
        try:
            return cls(x25519.X25519PrivateKey.generate())
        except (UnsupportedAlgorithm, ValueError) as exc:
            raise CryptoError(f"could not generate encryption keypair: {exc}") from exc

    def export_public_key(self) -> bytes:
        """Return the public key as PEM SubjectPublicKeyInfo bytes."""
        try:
            return self._private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        except (UnsupportedAlgorithm, ValueError) as exc:
            raise CryptoError(f"could not export public key: {exc}") from exc

    def decrypt(self, ciphertext: bytes) -> bytes:
        if len(ciphertext) < _PUBLIC_LEN + _NONCE_LEN + _TAG_LEN:
            raise CryptoError("ciphertext too short")
        ephemeral_raw = ciphertext[:_PUBLIC_LEN]
        nonce = ciphertext[_PUBLIC_LEN:_PUBLIC_LEN + _NONCE_LEN]
        body = ciphertext[_PUBLIC_LEN + _NONCE_LEN:]
        try:
            ephemeral_public = x25519.X25519PublicKey.from_public_bytes(ephemeral_raw)
            shared_secret = self._private_key.exchange(ephemeral_public)
            key = _derive_key(shared_secret)
            return AESGCM(key).decrypt(nonce, body, ephemeral_raw)
        except (InvalidTag, ValueError) as exc:
            raise CryptoError("could not decrypt interaction") from exc

    def __repr__(self) -> str:
        return "KeyPair(<private>)"


def seal(public_key_pem: bytes, plaintext: bytes) -> bytes:
    """Encrypt ``plaintext`` for the holder of ``public_key_pem``.

    This is what the collaboration server does with each captured
    interaction before handing it out on ``/poll``.
    """
    try:
        recipient = serialization.load_pem_public_key(public_key_pem)
    except (UnsupportedAlgorithm, ValueError) as exc:
        raise CryptoError(f"invalid public key: {exc}") from exc
    if not isinstance(recipient, x25519.X25519PublicKey):
        raise CryptoError("public key is not an X25519 key")

    ephemeral_private = x25519.X25519PrivateKey.generate()
    ephemeral_raw = ephemeral_private.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    key = _derive_key(ephemeral_private.exchange(recipient))
    nonce = os.urandom(_NONCE_LEN)
    return ephemeral_raw + nonce + AESGCM(key).encrypt(nonce, plaintext, ephemeral_raw)


def _derive_key(shared_secret: bytes) -> bytes:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_HKDF_SALT,
        info=_HKDF_INFO,
    )
    return hkdf.derive(shared_secret)


__all__ = ["KeyPair", "seal"]
