"""Workspace descriptor model, parser and file helpers."""

from .files import (
    WORKSPACE_FILE_NAME,
    find_workspace_file,
    load_workspace,
    load_workspace_from_dir,
    save_workspace,
)
from .models import InstallMode, ToolEntry, WorkspaceDescriptor
from .parser import check_format, dump_workspace, normalize_workspace_content, parse_workspace

__all__ = [
    "InstallMode",
    "ToolEntry",
    "WORKSPACE_FILE_NAME",
    "WorkspaceDescriptor",
    "check_format",
    "dump_workspace",
    "find_workspace_file",
    "load_workspace",
    "load_workspace_from_dir",
    "normalize_workspace_content",
    "parse_workspace",
    "save_workspace",
]
