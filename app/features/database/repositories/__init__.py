"""Database Repositories - Organized data access."""

from app.features.database.repositories.base import BaseRepository, DuplicateKeyError
from app.features.database.repositories.journals import JournalsRepository
from app.features.database.repositories.users import UsersRepository

__all__ = [
    "BaseRepository",
    "DuplicateKeyError",
    "JournalsRepository",
    "UsersRepository",
]
