"""
Exception taxonomy for the repository and document services.
"""

from typing import Optional


class VigilError(Exception):
    """Base class for errors raised by Vigil services"""
    pass


class AuthError(VigilError):
    """The GitHub credential is missing, invalid or expired"""
    pass


class AccessError(VigilError):
    """The credential is valid but the repository or path is unreachable"""

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason or message


class FetchError(VigilError):
    """Content retrieval failed (bad locator, HTTP failure, unsupported encoding)"""
    pass


class DecodeError(VigilError):
    """Text does not conform to its claimed or detected format"""
    pass
