"""Admin config and maintenance commands for the storage CLI."""

import json
from pathlib import Path
from typing import Annotated

from rich.console import Console
import typer

from src.config import get_logger
from src.infrastructure.cli.async_helpers import run_with_storage
from src.infrastructure.cli.ui import command_error_handler

console = Console()
logger = get_logger(__name__)

# Create admin-config subcommand app
app = typer.Typer(help="Read and replace the admin config", no_args_is_help=True)


def register_admin_commands(main_app: typer.Typer) -> None:
    """Register top-level maintenance commands with the Typer app."""
    main_app.command(
        name="clear-data",
        help="Delete every stored record, user and config",
        rich_help_panel="⚙️ System",
    )(clear_data)


@app.command(name="show")
@command_error_handler
def show_admin_config() -> None:
    """Print the stored admin config as JSON."""
    config = run_with_storage(lambda storage: storage.get_admin_config())
    if config is None:
        console.print("[yellow]No admin config stored[/yellow]")
        return
    console.print_json(json.dumps(config))


@app.command(name="set")
@command_error_handler
def set_admin_config(
    file: Annotated[
        Path,
        typer.Argument(
            help="JSON file holding the admin config object",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
) -> None:
    """Replace the admin config with the contents of a JSON file."""
    config = json.loads(file.read_text(encoding="utf-8"))
    if not isinstance(config, dict):
        raise typer.BadParameter("admin config must be a JSON object", param_hint="FILE")

    run_with_storage(lambda storage: storage.set_admin_config(config))
    logger.info("Admin config replaced", keys=len(config))
    console.print(f"[green]✓ Admin config stored[/green] [dim]({len(config)} keys)[/dim]")


@command_error_handler
def clear_data(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the confirmation prompt"),
    ] = False,
) -> None:
    """Delete every stored record, user and config."""
    if not yes:
        typer.confirm("This deletes ALL stored data. Continue?", abort=True)

    run_with_storage(lambda storage: storage.clear_all_data())
    console.print("[green]✓ All data cleared[/green]")
