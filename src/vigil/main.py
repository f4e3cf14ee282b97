"""
Main entry point for Vigil - repository incident tools for AI agents.

Exposes the tool registry over HTTP: an agent lists the tools, then calls
them one at a time with JSON input.
"""

import json
import logging
from typing import Any, Dict

from fastapi import Depends, FastAPI, HTTPException, Request

from . import __version__
from .config import Settings
from .tools import ToolCall, ToolContext, UnknownToolError, create_default_tool_executor

logger = logging.getLogger(__name__)


app = FastAPI(title="Vigil - Repository Incident Tools")

tool_executor = create_default_tool_executor()


def get_tool_context() -> ToolContext:
    """Build a fresh context per call from the current environment."""
    return ToolContext(settings=Settings.from_env())


@app.get("/tools")
async def list_tools():
    """List every tool with its description and input schema"""
    return {"tools": tool_executor.get_tool_definitions_for_api()}


@app.post("/tools/{tool_name}")
async def call_tool(tool_name: str, request: Request, context: ToolContext = Depends(get_tool_context)):
    """
    Invoke a tool.

    The request body is the tool input. Tool failures come back with
    ``is_error`` set; unknown tools and invalid input are HTTP errors.
    """
    try:
        body = await request.body()
        tool_input: Dict[str, Any] = json.loads(body) if body else {}
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")

    if not isinstance(tool_input, dict):
        raise HTTPException(status_code=400, detail="Tool input must be a JSON object")

    try:
        response = await tool_executor.execute(ToolCall(name=tool_name, input=tool_input), context)
    except UnknownToolError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"content": response.content, "is_error": response.is_error}


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "vigil",
        "tools": len(tool_executor.get_tool_names())
    }


@app.get("/")
async def root():
    """Root endpoint with service info"""
    return {
        "name": "Vigil",
        "description": "Repository incident tools for AI agents",
        "version": __version__,
        "tools": tool_executor.get_tool_names(),
        "features": [
            "Repository file discovery",
            "JSON, Markdown, YAML and text parsing",
            "Severity-routed email notifications",
            "GitHub issues for high severity incidents"
        ]
    }
