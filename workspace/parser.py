"""
workspace.parser
----------------
Reads and writes the line-oriented ``nimsforest.workspace`` format::

    nimsforest 1.0

    organization ./acme-organization-workspace

    products (
        ./products-workspace/alpha-workspace
    )

    tools (
        example-tool binary bin/example-tool latest
    )

Blank lines and lines starting with ``#`` are ignored everywhere.
Parsing is a small state machine (start -> header -> products|tools ->
header). Block contents are collected first and applied through the
model's mutators, so parsed and programmatically built descriptors agree.
"""

from __future__ import annotations

import logging
import re

from common.errors import FormatError

from .models import InstallMode, ToolEntry, WorkspaceDescriptor

logger = logging.getLogger(__name__)

VERSION_KEYWORD = "nimsforest"
INDENT = "    "

_VERSION_RE = re.compile(r"^\d+\.\d+$")
_BLOCK_RE = re.compile(r"^(products|tools)\s*\(\s*$")
_MODES = {mode.value for mode in InstallMode}

# parser states
START = "start"
HEADER = "header"
PRODUCTS = "products"
TOOLS = "tools"


def _is_ignorable(line: str) -> bool:
    return not line or line.startswith("#")


def parse_workspace(content: str) -> WorkspaceDescriptor:
    """Parse descriptor text. Raises FormatError with the 1-based line number."""
    lines = content.splitlines()
    state = START
    block_opened_at = 0
    descriptor = WorkspaceDescriptor()
    organization = None
    products: list[str] = []
    tools: list[ToolEntry] = []

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if _is_ignorable(line):
            continue

        if state == START:
            descriptor.version = _parse_version_line(line, lineno)
            state = HEADER

        elif state == HEADER:
            keyword = line.split()[0]
            block = _BLOCK_RE.match(line)
            if block:
                state = block.group(1)
                block_opened_at = lineno
            elif keyword == "organization":
                # later occurrences overwrite earlier ones
                organization = _parse_organization_line(line, lineno)
            elif keyword.split("(")[0] in (PRODUCTS, TOOLS):
                section = keyword.split("(")[0]
                raise FormatError(f"invalid {section} section start, expected '{section} (', got: {line}", lineno)
            else:
                raise FormatError(f"unexpected line in header section: {line}", lineno)

        elif state == PRODUCTS:
            if line == ")":
                state = HEADER
            else:
                products.append(line)

        elif state == TOOLS:
            if line == ")":
                state = HEADER
            else:
                tools.append(_parse_tool_line(line, lineno))

    if state == START:
        raise FormatError("missing version line, expected 'nimsforest <version>'", max(len(lines), 1))
    if state in (PRODUCTS, TOOLS):
        raise FormatError(f"{state} section not properly closed with ')'", block_opened_at)

    descriptor.organization_path = organization
    for product in products:
        descriptor.add_product(product)
    for tool in tools:
        descriptor.add_tool(tool)
    logger.debug(f"Parsed workspace: {len(descriptor.products)} products, {len(descriptor.tools)} tools")
    return descriptor


def _parse_version_line(line: str, lineno: int) -> str:
    parts = line.split()
    if len(parts) != 2:
        raise FormatError(f"invalid version line format, expected '{VERSION_KEYWORD} <version>', got: {line}", lineno)
    if parts[0] != VERSION_KEYWORD:
        raise FormatError(f"invalid version line, expected '{VERSION_KEYWORD}', got: {parts[0]}", lineno)
    if not _VERSION_RE.match(parts[1]):
        raise FormatError(f"invalid version format, expected format like '1.0', got: {parts[1]}", lineno)
    return parts[1]


def _parse_organization_line(line: str, lineno: int) -> str:
    parts = line.split()
    if len(parts) != 2:
        raise FormatError(f"invalid organization line format, expected 'organization <path>', got: {line}", lineno)
    return parts[1]


def _parse_tool_line(line: str, lineno: int) -> ToolEntry:
    parts = line.split()
    if len(parts) != 4:
        raise FormatError(f"invalid tool line format, expected 'name mode path version', got: {line}", lineno)
    name, mode, path, version = parts
    if mode not in _MODES:
        raise FormatError(f"invalid tool mode '{mode}', expected 'binary', 'clone', or 'submodule'", lineno)
    return ToolEntry(name=name, mode=InstallMode(mode), path=path, version=version)


def check_format(content: str) -> None:
    """Cheap pre-check: the first meaningful line must be the version line."""
    for lineno, raw in enumerate(content.splitlines(), start=1):
        line = raw.strip()
        if _is_ignorable(line):
            continue
        if line.startswith(VERSION_KEYWORD + " "):
            return
        raise FormatError(f"first non-empty, non-comment line must be version line starting with '{VERSION_KEYWORD}'", lineno)
    raise FormatError(f"version line starting with '{VERSION_KEYWORD}' not found", 1)


def dump_workspace(descriptor: WorkspaceDescriptor) -> str:
    """Serialize a descriptor. Deterministic; parse_workspace() reads it back unchanged."""
    sections = [f"{VERSION_KEYWORD} {descriptor.version}"]
    if descriptor.organization_path:
        sections.append(f"organization {descriptor.organization_path}")
    if descriptor.products:
        sections.append(_block(PRODUCTS, descriptor.products))
    if descriptor.tools:
        sections.append(_block(TOOLS, [tool.line() for tool in descriptor.tools]))
    return "\n\n".join(sections) + "\n"


def _block(name: str, entries: list[str]) -> str:
    body = "".join(f"{INDENT}{entry}\n" for entry in entries)
    return f"{name} (\n{body})"


def normalize_workspace_content(content: str) -> str:
    """Re-indent block entries and canonicalize block openers.

    Works on arbitrary, possibly invalid, text without parsing it. Comment
    lines are kept verbatim and blank lines are kept as empty lines.
    """
    normalized = []
    in_block = False
    for raw in content.split("\n"):
        line = raw.strip()
        if not line:
            normalized.append("")
            continue
        if line.startswith("#"):
            normalized.append(raw)
            continue

        block = _BLOCK_RE.match(line)
        if block:
            normalized.append(f"{block.group(1)} (")
            in_block = True
        elif line == ")" and in_block:
            normalized.append(")")
            in_block = False
        elif in_block:
            normalized.append(INDENT + line)
        else:
            normalized.append(line)
    return "\n".join(normalized)


__all__ = [
    "check_format",
    "dump_workspace",
    "normalize_workspace_content",
    "parse_workspace",
]
