"""
Database Feature Module - Journal data access layer.

Usage:
    from app.features.database import DatabaseClient

    db = await DatabaseClient.connect()
    user = await db.users.get_or_create(subject, email, name)
    entry = await db.journals.upsert(user["id"], entry_date, answers, ...)
"""

from app.features.database.client import DatabaseClient

__all__ = [
    "DatabaseClient",
]
