"""Exception types shared by every Esso module."""

from fastapi import HTTPException


class EssoError(Exception):
    """Base class for errors raised by the token core."""


class ConfigurationError(EssoError, ValueError):
    """
    Invalid or missing configuration.

    Raised at construction and rotation time (bad secret, bad flags,
    colliding names) and when a key store without any key is used.
    Never recoverable at request time.
    """


class TokenDecodeError(EssoError):
    """Token body could not be decrypted into UTF-8 text."""


class Unauthorized(HTTPException):
    """No credential was presented at all."""

    def __init__(self) -> None:
        super().__init__(status_code=401, detail="Unauthorized")


class Forbidden(HTTPException):
    """A credential was presented but did not validate."""

    def __init__(self) -> None:
        super().__init__(status_code=403, detail="Forbidden")
