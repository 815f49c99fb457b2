"""MoonTV storage CLI - Main application entry point and app structure."""

from importlib.metadata import PackageNotFoundError, version
from typing import Annotated

from rich.console import Console
import typer

from src.config import get_logger, settings, setup_loguru_logger
from src.infrastructure.cli import admin_commands, user_commands
from src.infrastructure.cli.admin_commands import register_admin_commands
from src.infrastructure.cli.setup_commands import register_setup_commands

try:
    VERSION = version("moontv-storage")
except PackageNotFoundError:
    VERSION = "0.0.0"

# Initialize console and logger with reasonable width
console = Console(width=80)
logger = get_logger(__name__)

app = typer.Typer(
    help=f"🌙 MoonTV storage v{VERSION} - Maintenance tools for per-user media storage",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)

app.add_typer(
    user_commands.app,
    name="users",
    help="Inspect and remove user accounts",
    rich_help_panel="👤 Accounts",
)

app.add_typer(
    admin_commands.app,
    name="admin-config",
    help="Read and replace the admin config",
    rich_help_panel="🛠 Admin",
)

register_setup_commands(app)
register_admin_commands(app)


@app.command(name="version", rich_help_panel="⚙️ System")
def version_command() -> None:
    """Show version information."""
    console.print(
        f"[bold bright_blue]🌙 MoonTV storage[/bold bright_blue] [dim]v{VERSION}[/dim]"
    )


@app.callback()
def init_cli(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Initialize the storage CLI."""
    # Store verbosity in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    setup_loguru_logger(verbose)

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    logger.debug("CLI initialized", verbose=verbose)
