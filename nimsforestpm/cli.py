"""
nimsforestpm.cli
----------------
Entry point for the 'nimsforestpm' command-line tool.

Manages the nimsforest.workspace descriptor and runs tools installed into
the workspace. If no command is given, the workspace status is shown.
"""

import logging
import os
import shutil
import stat
from pathlib import Path

import typer
from rich.markup import escape

from common.app_setup import print_and_log, print_error, setup_logging
from common.config import Settings, load_settings
from common.errors import ExecutionError, NimsforestError, ValidationError, WorkspaceNotFoundError
from runtimetool.manager import ToolManager
from workspace.files import WORKSPACE_FILE_NAME, find_workspace_file, load_workspace, save_workspace
from workspace.models import InstallMode, ToolEntry, WorkspaceDescriptor
from workspace.parser import check_format, normalize_workspace_content

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Bootstrap and manage nimsforest organizational workspaces. If no command is given, the workspace status is shown.")
workspace_app = typer.Typer(help="Inspect and edit the nimsforest.workspace file.")
tools_app = typer.Typer(help="Inspect tools installed into the workspace.")
app.add_typer(workspace_app, name="workspace")
app.add_typer(tools_app, name="tools")

SYSTEM_TOOLS = ["git", "make", "go"]


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context,
         config: Path | None = typer.Option(None, help="Settings file (YAML or JSON)"),
         verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level")):
    try:
        settings = load_settings(config)
    except NimsforestError as e:
        print_error(f"Error loading settings: {e}")
        raise typer.Exit(1)
    if verbose:
        settings.log_level = "DEBUG"
    setup_logging(app_name="nimsforestpm", loglevel=settings.log_level.upper(), logfile=settings.log_file)
    ctx.obj = settings
    if ctx.invoked_subcommand is None:
        try:
            ctx.invoke(workspace_status)
        finally:
            print_and_log("[bold yellow]Tip:[/bold yellow] Use [green]--help[/green] to see all available commands.")


# ---------------------------------------------------------------------------
# helpers


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else Settings()


def _fail(message: str, error: Exception | None = None, code: int = 1):
    if error is not None:
        message = f"{message}: {error}"
    print_error(message)
    raise typer.Exit(code)


def _load_current() -> WorkspaceDescriptor:
    """Load the workspace file found from the current directory upwards."""
    try:
        return load_workspace(find_workspace_file())
    except WorkspaceNotFoundError as e:
        _fail(f"{e}\nRun 'nimsforestpm workspace init <organization>' to create one")
    except NimsforestError as e:
        _fail("Failed to load workspace", e)


def _save(descriptor: WorkspaceDescriptor):
    try:
        save_workspace(descriptor)
    except OSError as e:
        _fail("Failed to save workspace", e)


# ---------------------------------------------------------------------------
# workspace


@workspace_app.command("init")
def workspace_init(organization: str = typer.Argument(..., help="Organization path recorded in the workspace")):
    """Create a nimsforest.workspace file in the current directory."""
    organization = organization.strip()
    if not organization:
        _fail("organization name cannot be empty")
    target = Path.cwd() / WORKSPACE_FILE_NAME
    if target.exists():
        _fail(f"workspace file already exists: {target}\nUse 'nimsforestpm workspace status' to view current configuration")
    try:
        descriptor = WorkspaceDescriptor(organization_path=organization)
    except ValueError as e:
        _fail(f"Invalid organization {organization!r}", e)
    try:
        save_workspace(descriptor, target)
    except OSError as e:
        _fail("Failed to save workspace file", e)
    print_and_log(f"Workspace initialized: {target}", markup=False)
    print_and_log(f"  Organization: {descriptor.organization_path}", markup=False)
    print_and_log(f"  Version: {descriptor.version}")


@workspace_app.command("status")
def workspace_status():
    """Show the workspace file, its products, tools and validation state."""
    descriptor = _load_current()
    print_and_log("[bold]=== Workspace Status ===[/bold]")
    print_and_log(f"File: {descriptor.source_path}", markup=False)
    print_and_log(f"Version: {descriptor.version}")
    if descriptor.organization_path:
        print_and_log(f"Organization: {descriptor.organization_path}", markup=False)

    print_and_log(f"Products ({len(descriptor.products)}):")
    for product in descriptor.products or ["(none)"]:
        print_and_log(f"  - {product}", markup=False)
    print_and_log(f"Tools ({len(descriptor.tools)}):")
    if not descriptor.tools:
        print_and_log("  - (none)", markup=False)
    for tool in descriptor.tools:
        print_and_log(f"  - {tool.name} ({tool.mode.value}) at {tool.path}", markup=False)

    print_and_log("\n[bold]=== Validation ===[/bold]")
    try:
        descriptor.validate()
        print_and_log("[green]Workspace is valid[/green]")
    except ValidationError as e:
        print_and_log("[yellow]Validation warnings:[/yellow]")
        for problem in e.problems:
            print_and_log(f"  - {problem}", markup=False)

    organization, products = descriptor.absolute_paths()
    print_and_log("\n[bold]=== Resolved Paths ===[/bold]")
    if organization:
        print_and_log(f"Organization: {organization}", markup=False)
    for product in products:
        print_and_log(f"  - {product}", markup=False)


@workspace_app.command("add")
def workspace_add(path: str = typer.Argument(..., help="Product path, relative to the workspace file")):
    """Add a product to the workspace."""
    path = path.strip()
    if not path:
        _fail("product path cannot be empty")
    descriptor = _load_current()
    if path in descriptor.products:
        print_and_log(f"Product already exists in workspace: {path}", markup=False)
        return
    descriptor.add_product(path)
    _save(descriptor)
    print_and_log(f"Added product to workspace: {path}", markup=False)
    print_and_log(f"  Total products: {len(descriptor.products)}")


@workspace_app.command("remove")
def workspace_remove(path: str = typer.Argument(..., help="Product path as listed in the workspace")):
    """Remove a product from the workspace."""
    path = path.strip()
    descriptor = _load_current()
    if path not in descriptor.products:
        print_error(f"Product not found in workspace: {path}")
        for product in descriptor.products:
            print_and_log(f"  - {product}", markup=False)
        raise typer.Exit(1)
    descriptor.remove_product(path)
    _save(descriptor)
    print_and_log(f"Removed product from workspace: {path}", markup=False)
    print_and_log(f"  Remaining products: {len(descriptor.products)}")


@workspace_app.command("validate")
def workspace_validate():
    """Parse the workspace file and check that every referenced path exists."""
    descriptor = _load_current()
    try:
        descriptor.validate()
    except ValidationError as e:
        for problem in e.problems:
            print_error(problem)
        raise typer.Exit(1)
    print_and_log(f"Workspace is valid: {descriptor.source_path}", markup=False)


@workspace_app.command("format")
def workspace_format(check: bool = typer.Option(False, "--check", help="Only report whether the file is normalized")):
    """Normalize indentation and block syntax of the workspace file."""
    try:
        path = find_workspace_file()
    except WorkspaceNotFoundError as e:
        _fail(str(e))
    content = path.read_text(encoding="utf-8")
    try:
        check_format(content)
    except NimsforestError as e:
        _fail(f"Cannot format {path}", e)
    normalized = normalize_workspace_content(content)
    if normalized == content:
        print_and_log(f"Already formatted: {path}", markup=False)
        return
    if check:
        print_error(f"Would reformat: {path}")
        raise typer.Exit(1)
    path.write_text(normalized, encoding="utf-8")
    print_and_log(f"Formatted: {path}", markup=False)


# ---------------------------------------------------------------------------
# tools


@app.command()
def install(name: str = typer.Option(..., "--name", "-n", help="Name of the tool to install"),
            path: Path = typer.Option(..., "--path", "-p", help="Path to the binary to install")):
    """Install a binary tool into <workspace>/bin and record it in the workspace file."""
    if not path.is_file():
        _fail(f"binary not found: {path}")
    try:
        workspace_file = find_workspace_file()
        descriptor = load_workspace(workspace_file)
    except WorkspaceNotFoundError:
        workspace_file = Path.cwd() / WORKSPACE_FILE_NAME
        descriptor = WorkspaceDescriptor()
        print_and_log(f"Creating workspace file: {workspace_file}", markup=False)
    except NimsforestError as e:
        _fail("Failed to load workspace", e)

    print_and_log(f"[bold]=== Installing Binary Tool: {name} ===[/bold]")
    bin_dir = workspace_file.parent / "bin"
    dest = bin_dir / name
    try:
        entry = ToolEntry(name=name, mode=InstallMode.BINARY, path=str(dest.resolve()), version="latest")
    except ValueError as e:
        _fail(f"Invalid tool entry for {name}", e)
    try:
        bin_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(path, dest)
        dest.chmod(dest.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        _fail(f"Failed to install {name}", e)
    print_and_log(f"Binary installed at: {dest}", markup=False)

    descriptor.add_tool(entry)
    try:
        save_workspace(descriptor, workspace_file)
    except OSError as e:
        _fail("Failed to save workspace", e)
    print_and_log(f"[green]{name} installed successfully![/green]")
    print_and_log(f"You can now use: nimsforestpm run {name} <command>", markup=False)


@tools_app.command("list")
def tools_list():
    """List tools with their install mode, capabilities and health."""
    manager = ToolManager(_load_current())
    registry = manager.register_all()
    if not len(registry):
        print_and_log("No tools installed.")
        return
    for registered in registry.list():
        tool = manager.get_tool(registered.name)
        try:
            tool.validate()
            health = "[green]ok[/green]"
        except NimsforestError as e:
            health = f"[red]{escape(str(e))}[/red]"
        summary = escape(f"{tool.name} {tool.version} ({tool.mode.value}) at {tool.path}")
        print_and_log(f"{summary} | capabilities: {', '.join(registered.capability_names)} | {health}")


@tools_app.command("commands")
def tools_commands(ctx: typer.Context, name: str = typer.Argument(..., help="Tool name")):
    """Discover the commands a tool advertises in its help output."""
    manager = ToolManager(_load_current())
    try:
        commands = manager.get_tool_commands(name, timeout=_settings(ctx).discovery_timeout)
    except NimsforestError as e:
        _fail(f"Cannot inspect {name}", e)
    if not commands:
        print_and_log(f"No commands discovered for {name}.", markup=False)
        return
    for command in commands:
        print_and_log(command, markup=False)


@tools_app.command("validate")
def tools_validate():
    """Check that every tool resolves to an existing executable."""
    manager = ToolManager(_load_current())
    try:
        manager.validate_all_tools()
    except ValidationError as e:
        for problem in e.problems:
            print_error(problem)
        raise typer.Exit(1)
    print_and_log(f"All {len(manager.list_tools())} tools are valid.")


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def run(ctx: typer.Context,
        name: str = typer.Argument(..., help="Tool name"),
        command: str = typer.Argument(..., help="Command passed to the tool"),
        args: list[str] | None = typer.Argument(None, help="Arguments passed to the tool")):
    """Run a tool command; the tool's exit code becomes this command's exit code."""
    manager = ToolManager(_load_current())
    try:
        manager.execute_command(name, command, list(args or []) + list(ctx.args),
                                timeout=_settings(ctx).execute_timeout)
    except ExecutionError as e:
        _fail(str(e), code=e.exit_code)
    except NimsforestError as e:
        _fail(f"Cannot run {name}", e)


@app.command()
def hello():
    """System compatibility check."""
    print_and_log("[bold]=== nimsforestpm system check ===[/bold]")
    missing = []
    for tool in SYSTEM_TOOLS:
        location = shutil.which(tool)
        if location:
            print_and_log(f"{tool} available at {location}", markup=False)
        else:
            missing.append(tool)
            print_and_log(f"[yellow]{tool} not found on PATH[/yellow]")
    print_and_log(f"Working directory: {os.getcwd()}", markup=False)
    if missing:
        print_and_log(f"Some installation modes need: {', '.join(missing)}", markup=False)


if __name__ == "__main__":
    app()
