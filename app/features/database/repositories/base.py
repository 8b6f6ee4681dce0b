"""Shared query execution for the Supabase repositories."""

import logging

import httpx
from postgrest.exceptions import APIError

from app.shared.errors import PersistenceError

logger = logging.getLogger("QJournal.Database")

# Postgres SQLSTATE for a unique constraint violation
UNIQUE_VIOLATION = "23505"


class DuplicateKeyError(PersistenceError):
    """An insert hit a unique constraint."""


class BaseRepository:
    """Holds the Supabase client and turns client failures into PersistenceError."""

    table_name: str = ""

    def __init__(self, client):
        """Initialize with Supabase async client."""
        self.client = client

    def table(self):
        return self.client.table(self.table_name)

    async def _execute(self, query, operation: str):
        try:
            return await query.execute()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise DuplicateKeyError(
                    f"Duplicate key on {self.table_name}",
                    details={"operation": operation},
                ) from exc
            logger.error(f"Error during {operation} on {self.table_name}: {exc.message}")
            raise PersistenceError(
                "Database operation failed",
                details={"operation": operation},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(f"Database unreachable during {operation} on {self.table_name}: {exc}")
            raise PersistenceError(
                "Database unavailable",
                details={"operation": operation},
            ) from exc

    async def ping(self) -> bool:
        """Read a single row; False when the database cannot be reached."""
        try:
            await self._execute(self.table().select("id").limit(1), "ping")
        except PersistenceError:
            return False
        return True
