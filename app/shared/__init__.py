# Shared errors, logging and request correlation
from .errors import (
    AnalysisError,
    AuthError,
    ConfigurationError,
    GenerationError,
    InvalidTokenError,
    NotFoundError,
    PersistenceError,
    QJournalError,
    ValidationError,
)

__all__ = [
    "AnalysisError",
    "AuthError",
    "ConfigurationError",
    "GenerationError",
    "InvalidTokenError",
    "NotFoundError",
    "PersistenceError",
    "QJournalError",
    "ValidationError",
]
