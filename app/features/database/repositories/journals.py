"""
Journals Repository - Journal entry data access operations.

Handles all journal-related database operations including:
- Writing the day's entry (one per user per date, last write wins)
- Listing a user's recent entries
- Getting an entry by date
"""

import logging
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from app.core.tracing import get_tracer
from app.features.database.repositories.base import BaseRepository

logger = logging.getLogger("QJournal.Database.Journals")
tracer = get_tracer(__name__)


class JournalsRepository(BaseRepository):
    """Repository for journal entry operations."""

    table_name = "journal_entries"

    async def upsert(
        self,
        user_id: int,
        entry_date: date,
        answers: Dict[str, str],
        one_line_summary: str,
        four_sentence_summary: Optional[str],
        contentment_score: int,
    ) -> Dict:
        """
        Write the entry for (user_id, entry_date).

        A single INSERT ... ON CONFLICT (user_id, entry_date) DO UPDATE:
        an existing row has every column replaced, ``created_at`` included.
        Nothing from the previous submission survives.
        """
        payload = {
            "user_id": user_id,
            "entry_date": entry_date.isoformat(),
            "answers": dict(answers),
            "one_line_summary": one_line_summary,
            "four_sentence_summary": four_sentence_summary,
            "contentment_score": contentment_score,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        with tracer.start_as_current_span("journal.upsert_entry"):
            result = await self._execute(
                self.table().upsert(payload, on_conflict="user_id,entry_date"),
                "upsert",
            )

        entry = result.data[0]
        logger.info(
            f"Journal entry saved: {entry.get('id')}",
            extra={"user_id": user_id, "entry_date": payload["entry_date"]},
        )
        return entry

    async def get_recent(self, user_id: int, limit: int = 30) -> List[Dict]:
        """Get a user's entries, newest date first, at most ``limit``."""
        result = await self._execute(
            self.table().select("*").eq("user_id", user_id).order("entry_date", desc=True).limit(limit),
            "select",
        )
        return result.data or []

    async def get_by_date(self, user_id: int, entry_date: date) -> Optional[Dict]:
        """Get a user's entry for one date."""
        result = await self._execute(
            self.table().select("*").eq("user_id", user_id).eq("entry_date", entry_date.isoformat()).limit(1),
            "select",
        )
        return result.data[0] if result.data else None
