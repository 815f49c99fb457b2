"""User account commands for the storage CLI."""

from typing import Annotated

from rich.console import Console
import typer

from src.config import get_logger
from src.infrastructure.cli.async_helpers import run_with_storage
from src.infrastructure.cli.ui import command_error_handler, display_usernames

console = Console()
logger = get_logger(__name__)

# Create users subcommand app
app = typer.Typer(help="Inspect and remove user accounts", no_args_is_help=True)


@app.command(name="list")
@command_error_handler
def list_users() -> None:
    """List every stored username."""
    usernames = run_with_storage(lambda storage: storage.get_all_users())
    display_usernames(usernames)


@app.command(name="delete")
@command_error_handler
def delete_user(
    username: Annotated[str, typer.Argument(help="User to delete")],
) -> None:
    """Delete a user account (records owned by the user are kept)."""
    run_with_storage(lambda storage: storage.delete_user(username))
    logger.info("Deleted user via CLI", username=username)
    console.print(f"[green]✓ Deleted user[/green] [cyan]{username}[/cyan]")
