# src/Tierbot/crypto.py
"""Ed25519 verification of Discord interaction requests."""

from __future__ import annotations

import binascii

import structlog
from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import VerifyKey

log = structlog.get_logger()


def _as_bytes(value: bytes | bytearray | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def verify_ed25519(
    public_key_hex: str | None,
    timestamp: str | None,
    body: bytes | bytearray | str,
    signature_hex: str | None,
) -> bool:
    """Check Discord's signature over ``timestamp + body``.

    ``body`` must be the raw request body exactly as received. Any problem
    (no key, missing header, undecodable hex, bad signature) yields False.
    """
    if not public_key_hex or not timestamp or not signature_hex:
        return False
    try:
        key = VerifyKey(bytes.fromhex(public_key_hex.strip()))
    except (ValueError, TypeError, CryptoError):
        log.warning("signature.bad_public_key")
        return False
    try:
        signature = binascii.unhexlify(signature_hex.strip())
    except (binascii.Error, ValueError):
        return False
    message = timestamp.encode("utf-8") + _as_bytes(body)
    try:
        key.verify(message, signature)
    except (BadSignatureError, ValueError, TypeError, CryptoError):
        return False
    return True
