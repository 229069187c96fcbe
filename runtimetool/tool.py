"""Runtime handle over one workspace tool entry."""

from __future__ import annotations

from box import Box

from workspace.models import InstallMode, ToolEntry, WorkspaceDescriptor

from . import discovery, dispatcher, resolver
from .registry import COMMANDS, EXECUTE, HEALTH, RegisteredTool


class RuntimeTool:
    """
    A tool entry resolved against its owning workspace.

    Nothing is cached: the executable path and commands are recomputed on
    every call, so edits to the workspace or the filesystem are picked up.

    Args:
        entry (ToolEntry): The tool entry from the workspace descriptor.
        descriptor (WorkspaceDescriptor): The workspace owning the entry.
            Relative clone/submodule paths resolve against its directory.
    """

    def __init__(self, entry: ToolEntry, descriptor: WorkspaceDescriptor | None = None):
        self.entry = entry
        self.descriptor = descriptor

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def version(self) -> str:
        return self.entry.version

    @property
    def mode(self) -> InstallMode:
        return self.entry.mode

    @property
    def path(self) -> str:
        return self.entry.path

    def executable_path(self) -> str:
        return resolver.get_executable_path(self.entry, self.descriptor)

    def validate(self) -> str:
        """Check the tool is installed and runnable. Returns the executable path."""
        return resolver.validate_tool(self.entry, self.descriptor)

    def commands(self, timeout: float | None = None) -> list[str]:
        """Subcommands advertised by the tool's help output."""
        return discovery.discover_commands(self.executable_path(), timeout=timeout)

    def execute(self, command: str, args: list[str] | None = None, timeout: float | None = None) -> int:
        return dispatcher.execute(self.entry, self.descriptor, command, args, timeout=timeout)

    @property
    def info(self) -> Box:
        """ Returns information about the tool,
            such as name, mode and where it resolves to, as a Box.
        """
        return Box({
            "name": self.name,
            "mode": self.mode.value,
            "path": self.path,
            "version": self.version,
            "executable": self.executable_path(),
        })

    def as_registered(self) -> RegisteredTool:
        """Describe this tool for a ToolRegistry."""
        return RegisteredTool(
            name=self.name,
            version=self.version,
            description=f"{self.mode.value} tool at {self.path}",
            capabilities={
                HEALTH: self.validate,
                COMMANDS: self.commands,
                EXECUTE: self.execute,
            },
        )

    def __repr__(self) -> str:
        return f"RuntimeTool(name={self.name!r}, mode={self.mode.value!r}, path={self.path!r})"


__all__ = ["RuntimeTool"]
