"""Payload (de)serialization for token plaintext."""

import json
from typing import Any, Dict, Mapping, Optional

# Empty payloads encrypt this instead of "{}" to keep tokens short
EMPTY_PAYLOAD_SENTINEL = "`"


def encode_payload(payload: Optional[Mapping[str, Any]]) -> str:
    if not payload:
        return EMPTY_PAYLOAD_SENTINEL
    if not isinstance(payload, Mapping):
        raise TypeError(f"token payload should be a mapping, got {type(payload).__name__}")
    return json.dumps(dict(payload), separators=(",", ":"))


def decode_payload(plaintext: str) -> Dict[str, Any]:
    """
    Parse decrypted token plaintext.

    Raises:
        ValueError: If the plaintext is not a JSON object
    """
    if plaintext == EMPTY_PAYLOAD_SENTINEL:
        return {}
    payload = json.loads(plaintext)
    if not isinstance(payload, dict):
        raise ValueError("token payload is not a JSON object")
    return payload
