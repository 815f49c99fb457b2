"""UI helpers for CLI interaction.

This module provides reusable UI components and helpers for the CLI,
keeping the presentation logic separate from storage logic.
"""

from collections.abc import Callable
import functools
from typing import ParamSpec, TypeVar

from rich.console import Console
from rich.table import Table
import typer

from src.config import get_logger

# Initialize console and logger
console = Console()
logger = get_logger(__name__)

# Type variables for command handler decorator
P = ParamSpec("P")
R = TypeVar("R")


def command_error_handler[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    This decorator wraps a command function to:
    1. Provide consistent error handling using Typer's Exit mechanism
    2. Log errors using Loguru with proper context
    3. Display user-friendly error messages with Rich

    Args:
        func: The command function to wrap

    Returns:
        Wrapped function with integrated error handling
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        # Get operation name from function name for logging context
        operation = func.__name__.replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                logger.debug(f"Executing {operation}")
                return func(*args, **kwargs)

            except typer.Exit:
                # Let typer.Exit propagate to Typer - it's already being handled
                raise

            except typer.Abort:
                # User initiated abort (e.g., declined confirmation), log and re-raise
                logger.info(f"Operation {operation} aborted by user")
                raise

            except Exception as e:
                logger.exception(f"Error during {operation}")
                display_error(e, operation)

                # Convert to Typer exit for proper exit code
                raise typer.Exit(code=1) from e

    return wrapper


def display_error(error: Exception, operation: str) -> None:
    """Display error message with consistent formatting."""
    console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {error}")


def display_usernames(usernames: list[str]) -> None:
    """Render usernames as a numbered table."""
    if not usernames:
        console.print("[yellow]No users stored[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Username", style="cyan")
    for i, username in enumerate(usernames, 1):
        table.add_row(str(i), username)

    console.print(table)
