"""
Authentication Module - Black Box Interface

Purpose: Issue tokens and validate them on incoming requests
Interface: TokenIssuer.issue(), TokenValidator.validate(), ExtraValidator
Hidden: Payload encoding, prefix handling, failure classification

The validator runs: extract -> prefix check -> decrypt -> decode ->
extra validation, and either attaches the payload to the request or
raises Unauthorized / Forbidden.
"""

from .interfaces import CallableValidator, ExtraValidator, NoopValidator, as_extra_validator
from .issuer import TokenIssuer
from .payload import EMPTY_PAYLOAD_SENTINEL, decode_payload, encode_payload
from .validator import TokenValidator

__all__ = [
    "EMPTY_PAYLOAD_SENTINEL",
    "CallableValidator",
    "ExtraValidator",
    "NoopValidator",
    "TokenIssuer",
    "TokenValidator",
    "as_extra_validator",
    "decode_payload",
    "encode_payload",
]
