"""
runtimetool.discovery
---------------------
Find out which subcommands an installed tool offers by running it with a
help flag and scanning the output for a "Commands:" style section.

This is text mining, so it depends on the tool's help format and locale.
Tools without recognizable help text simply report no commands.
"""

from __future__ import annotations

import logging
import re
import subprocess

logger = logging.getLogger(__name__)

HELP_FLAGS = ("--help", "-h", "help")

_COMMAND_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def parse_commands(output: str) -> list[str]:
    """Extract command names from help text, in order of appearance.

    A line containing "command" (any case) and ":" opens a section; each
    following indented line contributes its first word if it looks like a
    command name. A blank or unindented line closes the section. A name
    seen twice is listed once, at its first position.
    """
    commands: list[str] = []
    in_section = False
    for line in output.splitlines():
        if in_section:
            if line.strip() and line[0] in (" ", "\t"):
                name = line.split()[0]
                if _COMMAND_NAME_RE.match(name) and name not in commands:
                    commands.append(name)
                continue
            in_section = False
        if "command" in line.lower() and ":" in line:
            in_section = True
    return commands


def _probe(executable: str, args: list[str], timeout: float | None) -> str | None:
    """Run ``executable`` with ``args``; combined output, or None when unusable."""
    try:
        proc = subprocess.run(
            [executable, *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"{executable} {' '.join(args)} timed out after {timeout}s")
        return None
    except OSError as e:
        logger.debug(f"Cannot run {executable}: {e}")
        return None
    if proc.returncode != 0:
        logger.debug(f"{executable} {' '.join(args)} exited with {proc.returncode}")
        return None
    return proc.stdout


def discover_commands(executable: str, timeout: float | None = None) -> list[str]:
    """Try --help, -h, help, then no arguments; first non-empty result wins."""
    for args in [[flag] for flag in HELP_FLAGS] + [[]]:
        output = _probe(executable, args, timeout)
        if output is None:
            continue
        commands = parse_commands(output)
        if commands:
            logger.info(f"Discovered {len(commands)} commands for {executable} via {args or 'no arguments'}")
            return commands
    logger.info(f"No commands discovered for {executable}")
    return []


__all__ = ["HELP_FLAGS", "discover_commands", "parse_commands"]
