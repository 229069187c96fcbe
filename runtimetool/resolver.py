"""Map a tool entry to the executable it should run, per install mode."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from common.errors import ResolutionError, ToolValidationError
from workspace.models import InstallMode, ToolEntry, WorkspaceDescriptor

logger = logging.getLogger(__name__)


def get_executable_path(entry: ToolEntry, descriptor: WorkspaceDescriptor | None) -> str:
    """Return the path to run for ``entry``.

    binary: the entry path as-is.
    clone/submodule: ``<dir>/<name>``, then ``<dir>/bin/<name>``, else
    ``<dir>`` itself, where ``<dir>`` is the entry path resolved against the
    descriptor's directory. Callers decide whether a directory is usable.
    """
    mode = entry.mode
    if mode == InstallMode.BINARY:
        return entry.path
    if mode in (InstallMode.CLONE, InstallMode.SUBMODULE):
        tool_dir = _tool_dir(entry, descriptor)
        for candidate in (tool_dir / entry.name, tool_dir / "bin" / entry.name):
            if candidate.is_file():
                logger.debug(f"Resolved {entry.name} to {candidate}")
                return str(candidate)
        logger.debug(f"No executable for {entry.name} under {tool_dir}, returning the directory")
        return str(tool_dir)
    raise ResolutionError(f"unsupported tool mode: {mode}")


def _tool_dir(entry: ToolEntry, descriptor: WorkspaceDescriptor | None) -> Path:
    if descriptor is not None:
        resolved = descriptor.resolve(entry.path)
        if resolved is not None:
            return resolved
    # no source path to resolve against: relative to the current directory
    return Path(entry.path)


def validate_tool(entry: ToolEntry, descriptor: WorkspaceDescriptor | None) -> str:
    """Resolve and check the executable; return its path.

    The path must exist, and binary tools must carry an execute bit.
    """
    exec_path = get_executable_path(entry, descriptor)
    if not os.path.exists(exec_path):
        raise ToolValidationError(f"tool path does not exist: {exec_path}", exec_path)
    if entry.mode == InstallMode.BINARY:
        mode = os.stat(exec_path).st_mode
        if not mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
            raise ToolValidationError(f"tool binary is not executable: {exec_path}", exec_path)
    return exec_path


__all__ = ["get_executable_path", "validate_tool"]
