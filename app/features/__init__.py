"""
Features Module - Self-contained feature units.

Each feature is a modular unit with its own logic:
- auth: Keycloak token verification
- database: Organized data access repositories
- journaling: Journal submission, summaries and history
"""

from app.features.database import DatabaseClient

__all__ = [
    "DatabaseClient",
]
