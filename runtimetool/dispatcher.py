"""Run a workspace tool as a child process with the caller's stdio."""

from __future__ import annotations

import errno
import logging
import subprocess

from common.errors import ExecutionError
from workspace.models import ToolEntry, WorkspaceDescriptor

from .resolver import validate_tool

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
EXIT_TIMEOUT = 124


def execute(entry: ToolEntry, descriptor: WorkspaceDescriptor | None, command: str, args: list[str] | None = None,
            timeout: float | None = None) -> int:
    """Run ``<executable> command *args`` and return its exit code (0).

    stdin/stdout/stderr are inherited, nothing is captured. A non-zero exit
    raises ExecutionError carrying the child's exit code unchanged. Nothing
    is retried.
    """
    exec_path = validate_tool(entry, descriptor)
    argv = [exec_path, command, *(args or [])]
    logger.info(f"Executing {entry.name}: {argv}")
    try:
        proc = subprocess.run(argv, timeout=timeout)
    except FileNotFoundError as e:
        # passed validation but vanished before spawn
        raise ExecutionError(f"cannot run {entry.name}: {exec_path} not found", EXIT_NOT_FOUND) from e
    except PermissionError as e:
        raise ExecutionError(f"cannot run {entry.name}: permission denied for {exec_path}", EXIT_NOT_EXECUTABLE) from e
    except subprocess.TimeoutExpired as e:
        raise ExecutionError(f"{entry.name} {command} timed out after {timeout}s", EXIT_TIMEOUT) from e
    except OSError as e:
        code = EXIT_NOT_EXECUTABLE if e.errno in (errno.EACCES, errno.ENOEXEC, errno.EISDIR) else 1
        raise ExecutionError(f"cannot run {entry.name}: {e}", code) from e

    if proc.returncode != 0:
        logger.warning(f"{entry.name} {command} exited with {proc.returncode}")
        # killed by a signal: report the shell convention 128+N
        code = proc.returncode if proc.returncode > 0 else 128 - proc.returncode
        raise ExecutionError(f"{entry.name} {command} exited with code {proc.returncode}", code)
    return 0


__all__ = ["execute"]
