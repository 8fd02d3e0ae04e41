"""Token issuing."""

from typing import Any, Mapping, Optional

from ..crypto import encrypt
from ..keys import KeyStore
from .payload import encode_payload


class TokenIssuer:
    """Encrypts payloads under the current key and applies the token prefix."""

    def __init__(self, key_store: KeyStore, token_prefix: Optional[str] = "Bearer "):
        """
        Initialize issuer.

        Args:
            key_store: Shared key store
            token_prefix: Prepended to every token; None disables the prefix
        """
        self.key_store = key_store
        self.prefix = token_prefix if token_prefix is not None else ""

    async def issue(self, payload: Optional[Mapping[str, Any]] = None) -> str:
        """
        Generate an authentication token.

        The payload is made available on the request of every route that
        requires authentication. Keep it small: it travels with each request.

        Args:
            payload: JSON-serializable mapping; None or {} gives an empty payload

        Returns:
            Prefixed token string

        Raises:
            ConfigurationError: If the key store has no key yet
        """
        key = self.key_store.current_key()
        return self.prefix + encrypt(key, encode_payload(payload))
