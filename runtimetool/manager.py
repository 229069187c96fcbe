"""
runtimetool.manager
-------------------
Manages runtime tools for one workspace descriptor.

The manager owns no global state: the descriptor and (optionally) a
ToolRegistry are passed in by the caller.
"""

from __future__ import annotations

import logging
from pathlib import Path

from common.errors import NimsforestError, ValidationError
from workspace.files import load_workspace, save_workspace
from workspace.models import ToolEntry, WorkspaceDescriptor

from .registry import ToolRegistry
from .tool import RuntimeTool

logger = logging.getLogger(__name__)


class ToolManager:
    """Looks up, validates and runs the tools listed in a workspace."""

    def __init__(self, descriptor: WorkspaceDescriptor, registry: ToolRegistry | None = None):
        self._descriptor = descriptor
        self.registry = registry if registry is not None else ToolRegistry()

    @property
    def descriptor(self) -> WorkspaceDescriptor:
        return self._descriptor

    def get_tool(self, name: str) -> RuntimeTool:
        return RuntimeTool(self._descriptor.get_tool(name), self._descriptor)

    def list_tools(self) -> list[RuntimeTool]:
        return [RuntimeTool(entry, self._descriptor) for entry in self._descriptor.installed_tools()]

    def execute_command(self, name: str, command: str, args: list[str] | None = None,
                        timeout: float | None = None) -> int:
        return self.get_tool(name).execute(command, args, timeout=timeout)

    def get_tool_commands(self, name: str, timeout: float | None = None) -> list[str]:
        return self.get_tool(name).commands(timeout=timeout)

    def validate_all_tools(self) -> None:
        """Validate every tool; one ValidationError names all failures."""
        problems = []
        for tool in self.list_tools():
            try:
                tool.validate()
            except NimsforestError as e:
                problems.append(f"validation failed for tool {tool.name}: {e}")
        if problems:
            raise ValidationError("; ".join(problems), problems)

    def add_tool(self, entry: ToolEntry) -> None:
        self._descriptor.add_tool(entry)
        if entry.name in self.registry:
            self.registry.unregister(entry.name)

    def remove_tool(self, name: str) -> None:
        self._descriptor.remove_tool(name)
        if name in self.registry:
            self.registry.unregister(name)

    def register_all(self) -> ToolRegistry:
        """Publish every workspace tool into the registry, replacing stale entries."""
        for tool in self.list_tools():
            if tool.name in self.registry:
                self.registry.unregister(tool.name)
            self.registry.register(tool.as_registered())
        return self.registry

    def save_workspace(self) -> Path:
        if self._descriptor.source_path is None:
            raise ValidationError("workspace file path not set")
        return save_workspace(self._descriptor)

    def load_workspace(self, file_path: str | Path) -> None:
        """Replace the managed descriptor with a freshly loaded one."""
        self._descriptor = load_workspace(file_path)
        for name in [tool.name for tool in self.registry.list()]:
            self.registry.unregister(name)


__all__ = ["ToolManager"]
