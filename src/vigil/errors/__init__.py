"""
Error handling and formatting for Vigil.
"""

from .exceptions import VigilError, AuthError, AccessError, FetchError, DecodeError
from .formatter import ErrorFormatter, format_error_for_user
from .categories import ErrorCategory, categorize_error

__all__ = [
    "VigilError",
    "AuthError",
    "AccessError",
    "FetchError",
    "DecodeError",
    "ErrorFormatter",
    "format_error_for_user",
    "ErrorCategory",
    "categorize_error",
]
