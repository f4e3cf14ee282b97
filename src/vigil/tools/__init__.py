"""
Tools module - Provides all tool handlers exposed to the agent.
"""

from .base import (
    IToolHandler,
    BaseToolHandler,
    ToolCall,
    ToolContext,
    ToolDefinition,
    ToolResponse,
    ToolCategory,
    parse_repository
)
from .executor import ToolExecutor, UnknownToolError
from .repository_tools import (
    ScanRepositoryHandler,
    ParseDocumentHandler
)
from .incident_tools import (
    ExtractIncidentDataHandler,
    SendNotificationHandler,
    CreateGitHubIssuesHandler
)


def create_default_tool_executor() -> ToolExecutor:
    """
    Create a ToolExecutor with all default tools registered.

    Returns:
        ToolExecutor with all standard tools
    """
    executor = ToolExecutor()

    # Register repository tools
    executor.register(ScanRepositoryHandler())
    executor.register(ParseDocumentHandler())

    # Register incident tools
    executor.register(ExtractIncidentDataHandler())
    executor.register(SendNotificationHandler())
    executor.register(CreateGitHubIssuesHandler())

    return executor


__all__ = [
    # Base classes
    "IToolHandler",
    "BaseToolHandler",
    "ToolCall",
    "ToolContext",
    "ToolDefinition",
    "ToolResponse",
    "ToolCategory",
    "parse_repository",
    # Executor
    "ToolExecutor",
    "UnknownToolError",
    "create_default_tool_executor",
    # Repository tools
    "ScanRepositoryHandler",
    "ParseDocumentHandler",
    # Incident tools
    "ExtractIncidentDataHandler",
    "SendNotificationHandler",
    "CreateGitHubIssuesHandler",
]
