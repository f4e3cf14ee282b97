"""
Base classes and interfaces for the tool system.

This module defines the core abstractions for the tools an external agent
calls: definitions with JSON input schemas, handlers, and the per-call
context handlers build their services from.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
from enum import Enum

import httpx

from ..config import Settings
from ..errors.formatter import format_error_for_user
from ..github import GitHubClient


class ToolCategory(Enum):
    """Categories of tools exposed to the agent"""
    REPOSITORY = "repository"  # Repository discovery
    DOCUMENT = "document"  # Content retrieval and parsing
    INCIDENT = "incident"  # Incident formatting
    NOTIFICATION = "notification"  # Email and issue creation


@dataclass
class ToolResponse:
    """Response from a tool execution"""
    content: Any  # The actual result content
    metadata: Optional[Dict[str, Any]] = None  # Additional metadata

    @property
    def is_error(self) -> bool:
        return bool(self.metadata and self.metadata.get("error"))

    def to_string(self) -> str:
        """Convert response to string format"""
        if isinstance(self.content, str):
            return self.content
        return json.dumps(self.content, indent=2, default=str)


@dataclass
class ToolDefinition:
    """Definition of a tool for the agent"""
    name: str
    description: str
    input_schema: Dict[str, Any]  # JSON schema for tool inputs
    category: ToolCategory


@dataclass
class ToolCall:
    """A tool invocation: tool name plus its input"""
    name: str
    input: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolContext:
    """
    Per-invocation execution context.

    Handlers construct their own clients and services from it, so nothing
    is shared between invocations.
    """
    settings: Settings
    transport: Optional[httpx.AsyncBaseTransport] = None  # httpx transport override (tests)

    def github_client(self) -> GitHubClient:
        return GitHubClient(self.settings.github_config(), transport=self.transport)


def parse_repository(value: Any) -> Tuple[str, str]:
    """
    Split an ``owner/repo`` string.

    Raises:
        ValueError: Not exactly two non-empty parts
    """
    if not isinstance(value, str):
        raise ValueError('Repository must be a string in format "owner/repo"')

    parts = [part.strip() for part in value.split("/") if part.strip()]
    if len(parts) != 2:
        raise ValueError(
            'Repository must be in format "owner/repo" (e.g., "octocat/Hello-World")'
        )
    return parts[0], parts[1]


class IToolHandler(ABC):
    """
    Base interface for all tool handlers.

    Each tool handler implements:
    1. Tool definition (name, description, schema)
    2. Execution logic
    3. Optional validation
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name"""
        pass

    @property
    @abstractmethod
    def category(self) -> ToolCategory:
        """Tool category"""
        pass

    @abstractmethod
    def get_definition(self) -> ToolDefinition:
        """
        Get the tool definition for the agent.

        Returns:
            ToolDefinition with name, description, and input schema
        """
        pass

    @abstractmethod
    async def execute(self, input_data: Dict[str, Any], context: ToolContext) -> ToolResponse:
        """
        Execute the tool with given input.

        Args:
            input_data: Tool input parameters
            context: Execution context

        Returns:
            ToolResponse with results
        """
        pass

    def validate_input(self, input_data: Dict[str, Any]) -> None:
        """
        Validate tool input before execution.

        Args:
            input_data: Input to validate

        Raises:
            ValueError if validation fails
        """
        pass


class BaseToolHandler(IToolHandler):
    """
    Base implementation of IToolHandler with common functionality.

    Subclasses only need to implement:
    - name property
    - category property
    - get_definition()
    - execute()
    """

    def _format_error(self, error: Exception) -> str:
        """Format an error message for returning to the agent"""
        return format_error_for_user(error, self.name)

    def _success_response(self, content: Any, metadata: Optional[Dict] = None) -> ToolResponse:
        """Create a successful tool response"""
        return ToolResponse(content=content, metadata=metadata)

    def _error_response(self, error: Exception) -> ToolResponse:
        """Create an error tool response"""
        return ToolResponse(
            content=self._format_error(error),
            metadata={"error": True, "error_type": type(error).__name__}
        )

    @staticmethod
    def _require(input_data: Dict[str, Any], *keys: str) -> None:
        """Raise ValueError for required keys that are missing or empty."""
        missing = [key for key in keys if input_data.get(key) in (None, "")]
        if missing:
            raise ValueError(f"Missing required input: {', '.join(missing)}")
