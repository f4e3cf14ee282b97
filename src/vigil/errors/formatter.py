"""
Error message formatting for tool responses.
"""

from typing import Optional
from .categories import ErrorCategory, categorize_error


class ErrorFormatter:
    """
    Formats errors into the single descriptive string a tool call returns.
    """

    # Hints for each error category
    SUGGESTIONS = {
        ErrorCategory.AUTH: "Verify GITHUB_TOKEN is valid and has the 'repo' scope",
        ErrorCategory.ACCESS: "Check the repository name and that the token can see it",
        ErrorCategory.FETCH: "Use a download_url returned by scan_repository",
        ErrorCategory.DECODE: "Pass file_type explicitly or fix the document syntax",
        ErrorCategory.VALIDATION: "Check the tool input parameters",
        ErrorCategory.NETWORK: "Try again in a few moments",
        ErrorCategory.API: "Check the GitHub status page or wait for the rate limit to reset",
    }

    @staticmethod
    def format_error_concise(error: Exception, operation: Optional[str] = None) -> str:
        """
        Format an error concisely for a tool response.

        Args:
            error: The exception to format
            operation: Optional name of the operation that failed

        Returns:
            Concise error string
        """
        category, explanation = categorize_error(error)
        prefix = f"Error executing {operation}" if operation else "Error"

        message = f"{prefix} [{category.value}]: {explanation} - {str(error)}"
        suggestion = ErrorFormatter.SUGGESTIONS.get(category)
        if suggestion:
            message += f" ({suggestion})"
        return message


def format_error_for_user(error: Exception, operation: Optional[str] = None) -> str:
    """
    Convenience function to format an error for display to the caller.

    Args:
        error: The exception to format
        operation: Optional tool or operation name

    Returns:
        Formatted error message
    """
    return ErrorFormatter.format_error_concise(error, operation)
