"""
ToolExecutor - Coordinates tool execution using the coordinator pattern.

This module manages tool registration, lookup, and execution.
"""

import logging
from typing import Dict, List, Any, Optional
from ..errors.formatter import format_error_for_user
from .base import IToolHandler, ToolCall, ToolContext, ToolDefinition, ToolResponse, ToolCategory

logger = logging.getLogger(__name__)


class UnknownToolError(LookupError):
    """No handler is registered under the requested name"""
    pass


class ToolExecutor:
    """
    Coordinates tool execution for the agent.

    Responsibilities:
    1. Register tool handlers
    2. Provide tool definitions to the caller
    3. Route tool calls to appropriate handlers
    4. Validate input before a handler runs
    """

    def __init__(self):
        self._handlers: Dict[str, IToolHandler] = {}
        self._handlers_by_category: Dict[ToolCategory, List[IToolHandler]] = {
            category: [] for category in ToolCategory
        }

    def register(self, handler: IToolHandler) -> None:
        """
        Register a tool handler.

        Raises:
            ValueError if a handler with the same name already exists
        """
        if handler.name in self._handlers:
            raise ValueError(f"Tool handler '{handler.name}' is already registered")

        self._handlers[handler.name] = handler
        self._handlers_by_category[handler.category].append(handler)
        logger.debug(f"Registered tool: {handler.name} (category: {handler.category.value})")

    def register_multiple(self, handlers: List[IToolHandler]) -> None:
        """Register multiple tool handlers at once"""
        for handler in handlers:
            self.register(handler)

    def get_tool_definitions(self, categories: Optional[List[ToolCategory]] = None) -> List[ToolDefinition]:
        """
        Get tool definitions.

        Args:
            categories: Optional filter by categories. If None, returns all tools.
        """
        if categories is None:
            return [handler.get_definition() for handler in self._handlers.values()]

        definitions = []
        for category in categories:
            for handler in self._handlers_by_category.get(category, []):
                definitions.append(handler.get_definition())

        return definitions

    def get_tool_definitions_for_api(self, categories: Optional[List[ToolCategory]] = None) -> List[Dict[str, Any]]:
        """
        Get tool definitions as plain dictionaries.

        Returns list of tool objects with name, description, category and input_schema.
        """
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "category": tool.category.value,
                "input_schema": tool.input_schema
            }
            for tool in self.get_tool_definitions(categories)
        ]

    async def execute(self, tool_call: ToolCall, context: ToolContext) -> ToolResponse:
        """
        Execute a tool by routing to the appropriate handler.

        Args:
            tool_call: Tool name and input
            context: Execution context

        Returns:
            ToolResponse from the handler. Handler failures are returned as
            error responses, not raised.

        Raises:
            UnknownToolError if the tool is not registered
            ValueError if the input fails validation
        """
        tool_name = tool_call.name
        tool_input = tool_call.input or {}
        log_extra = {"tool": tool_name}

        handler = self._handlers.get(tool_name)
        if not handler:
            logger.error(f"Tool not found: {tool_name}", extra=log_extra)
            raise UnknownToolError(
                f"Unknown tool: {tool_name}. Available tools: {list(self._handlers.keys())}"
            )

        try:
            handler.validate_input(tool_input)
        except ValueError as e:
            logger.warning(f"Tool input validation failed for {tool_name}: {e}", extra=log_extra)
            raise ValueError(f"Invalid input for tool '{tool_name}': {str(e)}") from e

        logger.debug(f"Executing tool: {tool_name}", extra=log_extra)

        try:
            result = await handler.execute(tool_input, context)
        except Exception as e:
            logger.error(f"Tool {tool_name} execution failed: {e}", exc_info=True, extra=log_extra)
            return ToolResponse(
                content=format_error_for_user(e, tool_name),
                metadata={"error": True, "error_type": type(e).__name__}
            )

        if result.is_error:
            logger.warning(f"Tool {tool_name} completed with error: {result.content}", extra=log_extra)
        else:
            content_str = result.to_string()
            content_preview = content_str[:200] + "..." if len(content_str) > 200 else content_str
            logger.debug(f"Tool {tool_name} completed successfully. Result preview: {content_preview}", extra=log_extra)

        return result

    def has_tool(self, tool_name: str) -> bool:
        """Check if a tool is registered"""
        return tool_name in self._handlers

    def get_tool_names(self) -> List[str]:
        """Get list of all registered tool names"""
        return list(self._handlers.keys())

    def get_tools_by_category(self, category: ToolCategory) -> List[IToolHandler]:
        """Get all tools in a specific category"""
        return self._handlers_by_category.get(category, [])
