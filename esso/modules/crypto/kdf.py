"""
Key derivation for token encryption keys.

Keys are derived with scrypt so that recovering the secret from a leaked
key is expensive. The parameters match the defaults of Node's
``crypto.scrypt`` so keys (and therefore tokens) interoperate with the
JavaScript esso plugin.
"""

import asyncio

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ...errors import ConfigurationError

MIN_SECRET_LENGTH = 20
KEY_LENGTH = 32

SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1


def validate_secret(secret) -> str:
    """
    Check that a secret is usable for key derivation.

    Raises:
        ConfigurationError: If the secret is missing, not a string, or
            shorter than MIN_SECRET_LENGTH characters
    """
    if not secret or not isinstance(secret, str) or len(secret) < MIN_SECRET_LENGTH:
        raise ConfigurationError(
            f"the secret cannot be null and should have at least {MIN_SECRET_LENGTH} "
            "characters to be considered secure"
        )
    return secret


def derive_key(secret: str, context_label: str) -> bytes:
    """
    Derive a 32-byte AES key from a secret.

    Deterministic: the same secret and label always give the same key.

    Args:
        secret: Operator supplied secret (at least 20 characters)
        context_label: Domain separation value, the configured header name

    Returns:
        32 bytes of key material
    """
    validate_secret(secret)
    kdf = Scrypt(
        salt=context_label.encode("utf-8"),
        length=KEY_LENGTH,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
    )
    return kdf.derive(secret.encode("utf-8"))


async def derive_key_async(secret: str, context_label: str) -> bytes:
    """Derive a key in a worker thread so the event loop keeps serving requests."""
    validate_secret(secret)
    return await asyncio.to_thread(derive_key, secret, context_label)
