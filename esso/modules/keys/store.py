"""
Token key store with single-step rotation.

The store owns one reference to an immutable ``KeyPair``. Readers take
that reference once and use it for the whole operation, and ``rotate``
replaces it in a single assignment, so no reader ever combines a new
current key with a stale previous key.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ...errors import ConfigurationError, TokenDecodeError
from ..crypto import decrypt, derive_key, derive_key_async, validate_secret

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _identity(plaintext: str) -> str:
    return plaintext


@dataclass(frozen=True)
class KeyPair:
    """Current and previous derived keys. Either may be unset."""
    current: Optional[bytes] = None
    previous: Optional[bytes] = None


class KeyStore:
    """
    Current/previous key pair for token encryption.

    Validation tries the current key first and falls back to the previous
    one, which lets operators rotate the secret without logging out every
    client at once. A second rotation drops the oldest key for good.
    """

    def __init__(self, context_label: str):
        """
        Initialize an empty store.

        Args:
            context_label: Label mixed into key derivation (the header name)
        """
        self.context_label = context_label
        self._pair = KeyPair()
        self._lock = threading.Lock()
        self.rotations = 0

    @property
    def pair(self) -> KeyPair:
        """Snapshot of the key pair."""
        return self._pair

    @property
    def has_key(self) -> bool:
        return self._pair.current is not None

    def current_key(self) -> bytes:
        """
        Return the key new tokens are issued under.

        Raises:
            ConfigurationError: If no secret has been set yet
        """
        key = self._pair.current
        if key is None:
            raise ConfigurationError("Key is missing: set a secret before issuing or validating tokens")
        return key

    def rotate(self, new_secret: str) -> None:
        """Derive a key from ``new_secret`` and make it current."""
        self._install(derive_key(new_secret, self.context_label))

    async def rotate_async(self, new_secret: str) -> None:
        """Same as ``rotate`` but derives the key off the event loop."""
        validate_secret(new_secret)
        self._install(await derive_key_async(new_secret, self.context_label))

    def _install(self, key: bytes) -> None:
        with self._lock:
            self._pair = KeyPair(current=key, previous=self._pair.current)
            self.rotations += 1
            rotations = self.rotations
        logger.info(f"Token key rotated (rotation #{rotations})")

    def decrypt_with_fallback(
        self,
        token_body: str,
        decode: Callable[[str], T] = _identity,
    ) -> T:
        """
        Decrypt and decode a token body under the current key, then the previous one.

        ``decode`` runs per key, so plaintext that happens to unpad under the
        wrong key but is not a valid payload still falls through to the
        previous key.

        Args:
            token_body: Token without its prefix
            decode: Turns plaintext into the caller's result; raises ValueError on bad input

        Returns:
            Result of ``decode``

        Raises:
            ConfigurationError: If no key has ever been set
            TokenDecodeError: If neither key yields a decodable payload
        """
        pair = self._pair
        if pair.current is None:
            raise ConfigurationError("Key is missing: set a secret before issuing or validating tokens")

        last_error: Optional[Exception] = None
        for key in (pair.current, pair.previous):
            if key is None:
                continue
            try:
                result = decode(decrypt(key, token_body))
            except (TokenDecodeError, ValueError) as e:
                last_error = e
                continue
            if key is pair.previous:
                logger.debug("Token accepted under previous key")
            return result

        raise TokenDecodeError("token does not decrypt under the current or previous key") from last_error
