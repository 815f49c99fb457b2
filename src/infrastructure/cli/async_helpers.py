"""Async helpers for CLI commands to eliminate duplication."""

import asyncio
from collections.abc import Awaitable, Callable

from src.domain.repositories.interfaces import StorageProtocol
from src.infrastructure.persistence.database.db_connection import dispose_engine
from src.infrastructure.persistence.storage import get_storage


def run_with_storage[T](operation: Callable[[StorageProtocol], Awaitable[T]]) -> T:
    """Run an async storage operation to completion from a sync command.

    Each command gets its own event loop, so the engine bound to that loop is
    disposed before returning.
    """

    async def _run() -> T:
        try:
            return await operation(get_storage())
        finally:
            await dispose_engine()

    return asyncio.run(_run())
