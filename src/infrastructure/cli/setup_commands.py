"""Setup commands for the storage CLI."""

import asyncio

from rich.console import Console
import typer

from src.config import get_logger, log_startup_info, settings
from src.infrastructure.cli.ui import command_error_handler
from src.infrastructure.persistence.database.db_connection import dispose_engine
from src.infrastructure.persistence.database.db_models import init_db

# Initialize console and logger
console = Console()
logger = get_logger(__name__)


def register_setup_commands(app: typer.Typer) -> None:
    """Register setup commands with the Typer app."""
    app.command(
        name="init-db",
        help="Initialize the database schema",
        rich_help_panel="⚙️ System",
    )(initialize_database)


async def _create_schema() -> None:
    try:
        await log_startup_info()
        await init_db()
    finally:
        await dispose_engine()


@command_error_handler
def initialize_database() -> None:
    """Initialize the database schema based on current models.

    This command creates database tables that don't yet exist.
    Existing tables are left untouched.
    """
    with console.status("[bold blue]Initializing database schema...") as status:
        asyncio.run(_create_schema())

        status.update("[bold green]Database initialization complete!")
        console.print(
            "\n[bold green]✓ Database schema initialized successfully[/bold green]",
        )
        console.print(f"[dim]{settings.database.url}[/dim]")

        logger.info("Database initialization completed successfully")
