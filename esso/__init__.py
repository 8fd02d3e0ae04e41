"""
Esso - Stateless Encrypted Authentication Tokens for FastAPI

Issues opaque, encrypted tokens carrying an arbitrary payload and
validates them on later requests without any server-side session storage.

Architecture:
- Each module is self-contained with clear interfaces
- The core modules know nothing about FastAPI
- Only the plugin and middleware touch the host framework

Modules:
- crypto: Key derivation and the AES-256-CBC token codec
- keys: Current/previous key pair with rotation
- extraction: Token lookup in headers, query string and cookies
- auth: Token issuer, validator and the extra-validation hook
- middleware: App-wide guard for hosts that prefer middleware
"""

from .errors import ConfigurationError, EssoError, Forbidden, TokenDecodeError, Unauthorized
from .plugin import Esso, get_auth

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "Esso",
    "EssoError",
    "Forbidden",
    "TokenDecodeError",
    "Unauthorized",
    "get_auth",
]
