"""
Error categorization for user-friendly error messages.
"""

from enum import Enum
from typing import Tuple

import httpx

from .exceptions import AuthError, AccessError, FetchError, DecodeError


class ErrorCategory(Enum):
    """Categories of errors that can occur in Vigil"""
    AUTH = "authentication"
    ACCESS = "access"
    FETCH = "fetch"
    DECODE = "decode"
    VALIDATION = "validation"
    NETWORK = "network"
    API = "api"
    INTERNAL = "internal"


def categorize_error(error: Exception) -> Tuple[ErrorCategory, str]:
    """
    Categorize an error and provide a user-friendly explanation.

    Typed errors are matched first; anything else falls back to
    inspecting the message.

    Args:
        error: The exception to categorize

    Returns:
        Tuple of (ErrorCategory, explanation)
    """
    if isinstance(error, AuthError):
        return (
            ErrorCategory.AUTH,
            "Authentication failed - check that GITHUB_TOKEN is set and not expired"
        )

    if isinstance(error, AccessError):
        return (
            ErrorCategory.ACCESS,
            "Repository is not accessible with the configured token"
        )

    if isinstance(error, FetchError):
        return (
            ErrorCategory.FETCH,
            "Could not retrieve the file content"
        )

    if isinstance(error, DecodeError):
        return (
            ErrorCategory.DECODE,
            "Document does not match its format"
        )

    if isinstance(error, ValueError):
        return (
            ErrorCategory.VALIDATION,
            "Invalid tool input"
        )

    if isinstance(error, (httpx.TransportError, ConnectionError, TimeoutError)):
        return (
            ErrorCategory.NETWORK,
            "Network error - the service could not be reached"
        )

    error_str = str(error).lower()

    if "429" in error_str or "rate limit" in error_str:
        return (
            ErrorCategory.API,
            "Rate limit exceeded - too many requests"
        )

    if any(code in error_str for code in ["400", "403", "404", "422", "500", "502", "503"]):
        return (
            ErrorCategory.API,
            "API error - the service returned an error"
        )

    return (
        ErrorCategory.INTERNAL,
        "An unexpected error occurred"
    )
