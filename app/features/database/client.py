"""
Database Client - Access to the journal data repositories.

One client is created at application startup, stored on ``app.state`` and
handed to request handlers; it is closed at shutdown. The underlying
Supabase client pools its HTTP connections, so every query checks a
connection out for just that query.
"""

import logging
from typing import Optional

from supabase import AsyncClient, acreate_client

from app.core.config import settings
from app.features.database.repositories.journals import JournalsRepository
from app.features.database.repositories.users import UsersRepository
from app.shared.errors import ConfigurationError

logger = logging.getLogger("QJournal.Database")


class DatabaseClient:
    """
    Unified database client providing access to all repositories.

    Usage:
        db = await DatabaseClient.connect()
        user = await db.users.get_or_create(subject, email, name)
        entries = await db.journals.get_recent(user["id"], limit=30)
        await db.close()
    """

    def __init__(self, client: AsyncClient):
        """Initialize database client with all repositories."""
        self._client = client

        self.users = UsersRepository(self._client)
        self.journals = JournalsRepository(self._client)

        logger.info("Database client initialized with all repositories")

    @classmethod
    async def connect(cls, url: Optional[str] = None, key: Optional[str] = None) -> "DatabaseClient":
        """Create the Supabase client from explicit values or settings."""
        url = url or settings.SUPABASE_URL
        key = key or settings.SUPABASE_KEY
        if not url or not key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must be set")
        client = await acreate_client(url, key)
        return cls(client)

    @property
    def client(self) -> AsyncClient:
        """Direct access to Supabase client for advanced queries."""
        return self._client

    async def ping(self) -> bool:
        """Cheap round trip used by the health endpoint."""
        return await self.users.ping()

    async def close(self) -> None:
        """Release pooled connections."""
        await self._client.postgrest.aclose()
        logger.info("Database client closed")
