"""Pydantic models for the workspace descriptor and its tool entries."""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from common.errors import ToolNotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0"


class InstallMode(str, Enum):
    """How a tool was installed into the workspace."""

    BINARY = "binary"
    CLONE = "clone"
    SUBMODULE = "submodule"

    def __str__(self) -> str:
        return self.value


class ToolEntry(BaseModel):
    """One ``tools`` line: ``name mode path version``."""

    name: str = Field(..., description="Identifier, unique within a descriptor")
    mode: InstallMode
    path: str = Field(..., description="Relative to the descriptor's directory unless absolute")
    version: str = Field(..., description="Free-form version label")

    @field_validator("name", "path", "version")
    @classmethod
    def _single_field(cls, value: str) -> str:
        # each value is one whitespace-separated field of a tool line
        if not value or any(ch.isspace() for ch in value):
            raise ValueError("must be non-empty and contain no whitespace")
        return value

    def line(self) -> str:
        return f"{self.name} {self.mode.value} {self.path} {self.version}"


def _product_problem(path: str) -> str | None:
    """Why ``path`` cannot be written as a products block line, if it cannot."""
    if not path or path != path.strip():
        return f"product path must be non-empty without surrounding whitespace: {path!r}"
    if path.startswith("#") or path == ")":
        return f"product path would not read back from the products block: {path!r}"
    return None


class WorkspaceDescriptor(BaseModel):
    """In-memory copy of a ``nimsforest.workspace`` file.

    Two descriptors loaded from the same file are independent; nothing
    synchronizes them.
    """

    version: str = DEFAULT_VERSION
    organization_path: str | None = None
    products: list[str] = Field(default_factory=list)
    tools: list[ToolEntry] = Field(default_factory=list)
    source_path: Path | None = Field(default=None, description="File this descriptor was loaded from or saved to")

    @field_validator("organization_path", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("organization_path")
    @classmethod
    def _single_token(cls, value: str | None) -> str | None:
        # written as the second field of the organization line
        if value is not None and any(ch.isspace() for ch in value):
            raise ValueError("organization path cannot contain whitespace")
        return value

    @field_validator("products")
    @classmethod
    def _products_fit_block(cls, value: list[str]) -> list[str]:
        for path in value:
            problem = _product_problem(path)
            if problem:
                raise ValueError(problem)
        return value

    # ---------------------------------------------------------------------------
    # products

    def add_product(self, path: str) -> None:
        """Append ``path`` unless it is already listed (exact match).

        Raises ValidationError for values a products block cannot hold.
        """
        problem = _product_problem(path)
        if problem:
            raise ValidationError(problem)
        if path in self.products:
            logger.debug(f"Product already present: {path}")
            return
        self.products.append(path)

    def remove_product(self, path: str) -> None:
        """Remove the first exact match of ``path``; no-op if absent."""
        if path in self.products:
            self.products.remove(path)

    # ---------------------------------------------------------------------------
    # tools

    def add_tool(self, entry: ToolEntry) -> None:
        """Upsert by name: replace an existing entry in place, else append."""
        for i, existing in enumerate(self.tools):
            if existing.name == entry.name:
                self.tools[i] = entry
                logger.debug(f"Replaced tool entry: {entry.name}")
                return
        self.tools.append(entry)

    def remove_tool(self, name: str) -> None:
        self.tools = [tool for tool in self.tools if tool.name != name]

    def get_tool(self, name: str) -> ToolEntry:
        for tool in self.tools:
            if tool.name == name:
                return tool
        raise ToolNotFoundError(name)

    def installed_tools(self) -> list[ToolEntry]:
        return list(self.tools)

    # ---------------------------------------------------------------------------
    # paths

    @property
    def base_dir(self) -> Path | None:
        """Directory containing ``source_path``, or None before any load/save."""
        if self.source_path is None:
            return None
        return Path(self.source_path).parent

    def resolve(self, path: str) -> Path | None:
        """Resolve ``path`` against ``base_dir``. None when relative and unset."""
        if os.path.isabs(path):
            return Path(path)
        if self.base_dir is None:
            return None
        return self.base_dir / path

    def validate(self) -> None:
        """Check required fields and that referenced directories exist.

        Relative paths are skipped, not failed, while ``source_path`` is
        unset: there is nothing to resolve them against. Every failing path
        is reported in one ValidationError.
        """
        if not self.version:
            raise ValidationError("version cannot be empty")

        problems = []
        candidates = []
        if self.organization_path:
            candidates.append(("organization", self.organization_path))
        candidates.extend(("product", product) for product in self.products)

        for kind, raw in candidates:
            resolved = self.resolve(raw)
            if resolved is None:
                logger.debug(f"Skipping existence check for relative {kind} path {raw}: no source path")
                continue
            if not resolved.exists():
                problems.append(f"{kind} path does not exist: {resolved}")

        if problems:
            raise ValidationError("; ".join(problems), problems)

    def absolute_paths(self) -> tuple[str | None, list[str]]:
        """Return the organization path and product paths made absolute."""
        if self.source_path is None:
            raise ValidationError("workspace file path not set")
        organization = None
        if self.organization_path:
            organization = str(self.resolve(self.organization_path))
        return organization, [str(self.resolve(product)) for product in self.products]

    # ---------------------------------------------------------------------------
    # text

    def dumps(self) -> str:
        from .parser import dump_workspace
        return dump_workspace(self)

    def __str__(self) -> str:
        return self.dumps()


__all__ = [
    "DEFAULT_VERSION",
    "InstallMode",
    "ToolEntry",
    "WorkspaceDescriptor",
]
