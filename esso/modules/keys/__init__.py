"""
Keys Module - Black Box Interface

Purpose: Hold the current and previous token keys and rotate them
Interface: KeyStore.rotate(), rotate_async(), current_key(), decrypt_with_fallback()
Hidden: Key pair representation, locking, fallback order

Tokens issued under the previous key stay valid for exactly one rotation.
"""

from .store import KeyPair, KeyStore

__all__ = ["KeyPair", "KeyStore"]
