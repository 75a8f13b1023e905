"""AES-128-CBC session key derivation for gateway write commands.

A gateway broadcasts a short-lived token in its heartbeats. Write
commands must carry ``key = AES-128-CBC(secret, iv, token)`` in hex.
"""

from __future__ import annotations

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from pylumi.exceptions import LumiCryptoError

GATEWAY_IV = bytes(
    [0x17, 0x99, 0x6D, 0x09, 0x3D, 0x28, 0xDD, 0xB3, 0xBA, 0x69, 0x5A, 0x2E, 0x6F, 0x58, 0x56, 0x2E]
)

_BLOCK_BYTES = 16


def _secret_bytes(secret: str | bytes) -> bytes:
    try:
        key = secret.encode("ascii") if isinstance(secret, str) else bytes(secret)
    except UnicodeEncodeError as exc:
        raise LumiCryptoError("Gateway secret must be ASCII") from exc
    if len(key) != _BLOCK_BYTES:
        raise LumiCryptoError(f"Gateway secret must be {_BLOCK_BYTES} bytes (got {len(key)})")
    return key


def _token_bytes(token: str) -> bytes:
    """One byte per character, keeping the low 8 bits of each code point.

    Gateways and existing clients encode the token this way, so a
    non-ASCII token still derives a key instead of failing.
    """
    return bytes(ord(ch) & 0xFF for ch in token)


def derive_key(secret: str | bytes, token: str, iv: bytes = GATEWAY_IV) -> str:
    """Derive the hex write key for *token*.

    Parameters
    ----------
    secret : str or bytes
        16-byte gateway password.
    token : str
        Latest token seen in a gateway heartbeat. Characters outside
        ASCII are reduced to their low byte rather than rejected.
    iv : bytes
        Initialization vector, :data:`GATEWAY_IV` unless testing.

    Returns
    -------
    str
        Lowercase hex of the whole blocks produced before finalization.
        The trailing padding block is dropped, so a 16-character token
        yields exactly one block (32 hex characters).

    Raises
    ------
    LumiCryptoError
        If the secret has the wrong length or encryption fails.
    """
    key = _secret_bytes(secret)
    try:
        plaintext = _token_bytes(token)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ct = encryptor.update(padded) + encryptor.finalize()
    except Exception as exc:
        raise LumiCryptoError(f"Key derivation failed: {exc}") from exc
    whole_blocks = len(plaintext) - len(plaintext) % _BLOCK_BYTES
    return ct[:whole_blocks].hex()
