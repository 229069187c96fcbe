"""Resolve, inspect and run tools installed into a workspace."""

from .discovery import discover_commands, parse_commands
from .dispatcher import execute
from .manager import ToolManager
from .registry import RegisteredTool, ToolRegistry
from .resolver import get_executable_path, validate_tool
from .tool import RuntimeTool

__all__ = [
    "RegisteredTool",
    "RuntimeTool",
    "ToolManager",
    "ToolRegistry",
    "discover_commands",
    "execute",
    "get_executable_path",
    "parse_commands",
    "validate_tool",
]
