"""
workspace.files
---------------
Locating, loading and saving ``nimsforest.workspace`` files.

The descriptor file is the only shared state between invocations and no
locking is done: two processes running load -> mutate -> save at the same
time race, and the last writer wins.
"""

from __future__ import annotations

import logging
from pathlib import Path

from common.errors import WorkspaceNotFoundError

from .models import WorkspaceDescriptor
from .parser import dump_workspace, parse_workspace

logger = logging.getLogger(__name__)

WORKSPACE_FILE_NAME = "nimsforest.workspace"


def find_workspace_file(start_dir: str | Path | None = None) -> Path:
    """Walk from ``start_dir`` (default: cwd) up to the root looking for the descriptor."""
    start = Path(start_dir) if start_dir else Path.cwd()
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / WORKSPACE_FILE_NAME
        if candidate.is_file():
            logger.debug(f"Found workspace file: {candidate}")
            return candidate
    raise WorkspaceNotFoundError(f"workspace file not found in directory tree starting from {start}")


def load_workspace(file_path: str | Path) -> WorkspaceDescriptor:
    """Read and parse a descriptor file; ``source_path`` is set to its absolute path."""
    if not file_path:
        raise WorkspaceNotFoundError("file path cannot be empty")
    path = Path(file_path)
    if not path.is_file():
        raise WorkspaceNotFoundError(f"workspace file does not exist: {path}")
    descriptor = parse_workspace(path.read_text(encoding="utf-8"))
    descriptor.source_path = path.resolve()
    logger.info(f"Loaded workspace {descriptor.source_path}")
    return descriptor


def load_workspace_from_dir(directory: str | Path | None = None) -> WorkspaceDescriptor:
    return load_workspace(find_workspace_file(directory))


def save_workspace(descriptor: WorkspaceDescriptor, file_path: str | Path | None = None) -> Path:
    """Write ``descriptor`` to ``file_path`` (default: its ``source_path``)."""
    target = file_path or descriptor.source_path
    if not target:
        raise WorkspaceNotFoundError("file path cannot be empty")
    path = Path(target).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_workspace(descriptor), encoding="utf-8")
    descriptor.source_path = path
    logger.info(f"Saved workspace {path}")
    return path


__all__ = [
    "WORKSPACE_FILE_NAME",
    "find_workspace_file",
    "load_workspace",
    "load_workspace_from_dir",
    "save_workspace",
]
