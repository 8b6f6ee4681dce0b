"""
Users Repository - User data access operations.

Users are keyed by the identity provider's subject (``keycloak_sub``) and
created the first time that subject is seen. Name and email are copies of
the token claims and are refreshed when the claims change.
"""

import logging
from typing import Dict, Optional

from app.features.database.repositories.base import BaseRepository, DuplicateKeyError

logger = logging.getLogger("QJournal.Database.Users")


class UsersRepository(BaseRepository):
    """Repository for user operations."""

    table_name = "users"

    async def get_by_subject(self, subject: str) -> Optional[Dict]:
        """Get a user by identity-provider subject."""
        result = await self._execute(
            self.table().select("*").eq("keycloak_sub", subject).limit(1),
            "select",
        )
        return result.data[0] if result.data else None

    async def get_or_create(
        self,
        subject: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Dict:
        """
        Return the user for ``subject``, creating it on first sight.

        Two first-time requests for the same subject can both miss the
        lookup; the loser's insert hits the unique constraint on
        ``keycloak_sub`` and falls back to reading the winner's row.
        """
        existing = await self.get_by_subject(subject)
        if existing:
            return await self._refresh_profile(existing, email, name)

        logger.info("Creating user for new identity")
        try:
            result = await self._execute(
                self.table().insert({"keycloak_sub": subject, "email": email, "name": name}),
                "insert",
            )
        except DuplicateKeyError:
            logger.info("User was created concurrently, re-reading")
            winner = await self.get_by_subject(subject)
            if winner is None:
                raise
            return winner

        user = result.data[0]
        logger.info(f"User created: {user['id']}")
        return user

    async def _refresh_profile(self, user: Dict, email: Optional[str], name: Optional[str]) -> Dict:
        updates = {}
        if email and email != user.get("email"):
            updates["email"] = email
        if name and name != user.get("name"):
            updates["name"] = name
        if not updates:
            return user

        result = await self._execute(
            self.table().update(updates).eq("id", user["id"]),
            "update",
        )
        logger.info(f"Refreshed profile for user {user['id']}: {sorted(updates)}")
        return result.data[0] if result.data else {**user, **updates}
