"""
Token validation pipeline.

States: extracting -> prefix check -> decrypting -> decoding ->
extra validation -> authenticated | rejected. There is no retry: a
rejected request has to come back with a better credential.
"""

import logging
from typing import Any, Dict, Optional

from ...errors import Forbidden, TokenDecodeError, Unauthorized
from ..extraction import FieldExtractor
from ..keys import KeyStore
from .interfaces import ExtraValidator, NoopValidator
from .payload import decode_payload

logger = logging.getLogger(__name__)


class TokenValidator:
    """
    Validates the token on a request and attaches its payload.

    Failures are classified for the client only as Unauthorized (nothing
    presented) or Forbidden (something presented but unusable). The reason
    is logged server-side.
    """

    def __init__(
        self,
        key_store: KeyStore,
        extractor: FieldExtractor,
        token_prefix: Optional[str] = "Bearer ",
        auth_field: str = "auth",
        extra_validator: Optional[ExtraValidator] = None,
    ):
        """
        Initialize validator.

        Args:
            key_store: Shared key store
            extractor: Finds the token candidate on the request
            token_prefix: Required literal prefix; None accepts bare tokens
            auth_field: Attribute of ``request.state`` that receives the payload
            extra_validator: Hook that runs after the payload is attached
        """
        self.key_store = key_store
        self.extractor = extractor
        self.token_prefix = token_prefix
        self.auth_field = auth_field
        self.extra_validator = extra_validator or NoopValidator()

    def strip_prefix(self, candidate: str) -> str:
        """
        Remove the configured prefix.

        Raises:
            Forbidden: If the candidate does not start with the prefix
        """
        if self.token_prefix is None:
            return candidate
        if not candidate.startswith(self.token_prefix):
            raise Forbidden()
        return candidate[len(self.token_prefix):]

    def authenticate(self, request: Any) -> Dict[str, Any]:
        """
        Extract, decrypt and decode the token without touching the request.

        Returns:
            Decoded payload

        Raises:
            Unauthorized: No token candidate in any enabled source
            Forbidden: Wrong prefix, undecryptable token or invalid payload
            ConfigurationError: The key store has no key (fails closed)
        """
        path = _request_path(request)

        candidate = self.extractor.extract_from_request(request)
        if candidate is None:
            logger.warning(f"Request to {path} without token")
            raise Unauthorized()

        try:
            token = self.strip_prefix(candidate.value)
        except Forbidden:
            logger.warning(f"Token prefix mismatch on {path} (source: {candidate.source.value})")
            raise

        try:
            return self.key_store.decrypt_with_fallback(token, decode_payload)
        except TokenDecodeError as e:
            logger.warning(f"Invalid token on {path} (source: {candidate.source.value}): {e}")
            raise Forbidden() from None

    async def validate(self, request: Any, response: Any = None) -> Dict[str, Any]:
        """
        Run the full pipeline for one request.

        On success the payload is available as ``request.state.<auth_field>``.
        If the extra validation hook rejects the request the payload is
        removed again and the hook's exception propagates unchanged.

        Args:
            request: Starlette-style request (headers, query_params, cookies, state)
            response: Response handed to the extra validation hook

        Returns:
            Decoded payload
        """
        auth = self.authenticate(request)

        setattr(request.state, self.auth_field, auth)
        try:
            await self.extra_validator.validate(request, response)
        except BaseException:
            logger.warning(f"Extra validation rejected request to {_request_path(request)}")
            delattr(request.state, self.auth_field)
            raise

        return auth


def _request_path(request: Any) -> str:
    url = getattr(request, "url", None)
    return getattr(url, "path", "<unknown>")
