"""AES-256-CBC codec for token bodies."""

import os
import re

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ...errors import TokenDecodeError

IV_LENGTH = 16
# iv in hex format will always have 32 characters
IV_HEX_LENGTH = IV_LENGTH * 2

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def encrypt(key: bytes, plaintext: str) -> str:
    """
    Turn cleartext into a token body.

    A fresh random IV is generated on every call, so encrypting the same
    plaintext twice never yields the same body.

    Args:
        key: 32-byte AES key
        plaintext: Text to encrypt

    Returns:
        hex(IV) + hex(ciphertext)
    """
    iv = os.urandom(IV_LENGTH)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    encrypted = encryptor.update(padded) + encryptor.finalize()

    return iv.hex() + encrypted.hex()


def decrypt(key: bytes, token_body: str) -> str:
    """
    Turn a token body back into cleartext.

    Args:
        key: 32-byte AES key
        token_body: hex(IV) + hex(ciphertext), prefix already removed

    Returns:
        Decrypted text

    Raises:
        TokenDecodeError: If the body is too short, not hex, not a whole
            number of blocks, badly padded or not UTF-8
    """
    if not token_body or not isinstance(token_body, str) or len(token_body) < IV_HEX_LENGTH:
        raise TokenDecodeError("token body is too short to contain an IV")

    if not _HEX_RE.fullmatch(token_body):
        raise TokenDecodeError("token body is not hex encoded")

    try:
        iv = bytes.fromhex(token_body[:IV_HEX_LENGTH])
        encrypted = bytes.fromhex(token_body[IV_HEX_LENGTH:])
    except ValueError as e:
        raise TokenDecodeError("token body is not hex encoded") from e

    try:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(encrypted) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()

        return data.decode("utf-8")
    except ValueError as e:
        raise TokenDecodeError(f"token body could not be decrypted: {e}") from e
