"""
runtimetool.registry
--------------------
An explicit registry of tools and the optional capabilities each offers.

There is no process-wide instance: create a ToolRegistry and hand it to
whatever needs it. A tool lists its optional features by name in
``capabilities`` (e.g. ``health``, ``commands``, ``execute``,
``configure``) instead of being probed for methods at runtime.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from common.errors import CapabilityError, ToolAlreadyRegisteredError, ToolNotFoundError, ValidationError

logger = logging.getLogger(__name__)

HEALTH = "health"
COMMANDS = "commands"
EXECUTE = "execute"
CONFIGURE = "configure"


@dataclass
class RegisteredTool:
    """A named tool plus the callables implementing its capabilities."""

    name: str
    version: str = ""
    description: str = ""
    capabilities: dict[str, Callable[..., Any]] = field(default_factory=dict)

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities

    def invoke(self, capability: str, *args: Any, **kwargs: Any) -> Any:
        try:
            handler = self.capabilities[capability]
        except KeyError:
            raise CapabilityError(f"tool {self.name} does not support '{capability}'") from None
        return handler(*args, **kwargs)

    @property
    def capability_names(self) -> list[str]:
        return sorted(self.capabilities)


class ToolRegistry:
    """Registered tools keyed by name."""

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def register(self, tool: RegisteredTool) -> None:
        if not tool.name:
            raise ValidationError("tool name cannot be empty")
        if tool.name in self._tools:
            raise ToolAlreadyRegisteredError(tool.name)
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool {tool.name} with capabilities {tool.capability_names}")

    def unregister(self, name: str) -> None:
        if name not in self._tools:
            raise ToolNotFoundError(name, where="registry")
        del self._tools[name]

    def get(self, name: str) -> RegisteredTool:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name, where="registry") from None

    def exists(self, name: str) -> bool:
        return name in self._tools

    def list(self) -> list[RegisteredTool]:
        return [self._tools[name] for name in sorted(self._tools)]

    def find(self, capability: str | None = None) -> list[RegisteredTool]:
        """Tools offering ``capability`` (all tools when None), sorted by name."""
        return [tool for tool in self.list() if capability is None or tool.supports(capability)]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


__all__ = [
    "COMMANDS",
    "CONFIGURE",
    "EXECUTE",
    "HEALTH",
    "RegisteredTool",
    "ToolRegistry",
]
