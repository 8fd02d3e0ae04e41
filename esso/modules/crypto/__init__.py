"""
Crypto Module - Black Box Interface

Purpose: Turn secrets into keys and payloads into opaque token bodies
Interface: derive_key(), derive_key_async(), encrypt(), decrypt()
Hidden: scrypt parameters, IV generation, padding, hex framing

Token body format: 32 hex chars of IV followed by the hex ciphertext.
"""

from .cipher import IV_HEX_LENGTH, decrypt, encrypt
from .kdf import KEY_LENGTH, MIN_SECRET_LENGTH, derive_key, derive_key_async, validate_secret

__all__ = [
    "IV_HEX_LENGTH",
    "KEY_LENGTH",
    "MIN_SECRET_LENGTH",
    "decrypt",
    "derive_key",
    "derive_key_async",
    "encrypt",
    "validate_secret",
]
