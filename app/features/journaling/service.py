"""
Journal entry submission and history.

A submission is: validate the answers, resolve the caller's user row,
generate the summaries, then write the entry in one upsert. Nothing is
written unless every summary was generated.
"""

import logging
from datetime import date
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel

from app.core.logging_utils import describe_answers
from app.features.auth.keycloak import Identity
from app.features.database.client import DatabaseClient
from app.features.journaling.summaries import JournalSummaries, SummaryOrchestrator
from app.features.journaling.transcript import build_transcript, clean_answers
from app.shared.errors import (
    AnalysisError,
    ConfigurationError,
    GenerationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger("QJournal.Journal")


class SubmissionResult(BaseModel):
    """What a successful submission hands back to the caller."""
    entry_id: Optional[int] = None
    entry_date: date
    summaries: JournalSummaries


class JournalService:
    """Entry submission and history reads for one authenticated caller at a time."""

    def __init__(
        self,
        database: DatabaseClient,
        orchestrator: SummaryOrchestrator,
        history_limit: int = 30,
        dashboard_limit: int = 10,
        max_history_limit: int = 365,
    ):
        self.database = database
        self.orchestrator = orchestrator
        self.history_limit = history_limit
        self.dashboard_limit = dashboard_limit
        self.max_history_limit = max_history_limit

    async def resolve_user(self, identity: Identity) -> Dict:
        """The caller's user row, created on first sight."""
        return await self.database.users.get_or_create(
            identity.subject,
            email=identity.email,
            name=identity.display_name,
        )

    async def submit(
        self,
        identity: Identity,
        answers: Optional[Mapping[str, object]],
        entry_date: Optional[date] = None,
    ) -> SubmissionResult:
        """
        Summarize and store the caller's answers for ``entry_date`` (today by default).

        Raises:
            ValidationError: no answers, or only blank ones
            AnalysisError: user lookup, generation or the write failed; nothing was stored
        """
        if not answers:
            raise ValidationError("Answers are required")

        cleaned = clean_answers(answers)
        if not cleaned:
            raise ValidationError("At least one answer must be filled in")

        entry_date = entry_date or date.today()
        logger.info(
            "Processing journal submission",
            extra={"entry_date": entry_date.isoformat(), "answers": describe_answers(cleaned)},
        )

        try:
            user = await self.resolve_user(identity)
            summaries = await self.orchestrator.generate(build_transcript(cleaned))
            entry = await self.database.journals.upsert(
                user_id=user["id"],
                entry_date=entry_date,
                answers=cleaned,
                one_line_summary=summaries.one_line_summary,
                four_sentence_summary=summaries.four_sentence_summary,
                contentment_score=summaries.contentment_score,
            )
        except (GenerationError, PersistenceError, ConfigurationError) as exc:
            logger.error(f"Journal submission failed ({exc.code.value}): {exc.message}")
            raise AnalysisError(
                f"Failed to generate summary: {exc.message}",
                details={"cause": exc.code.value},
            ) from exc

        logger.info(
            "Journal submission stored",
            extra={"user_id": user["id"], "entry_date": entry_date.isoformat()},
        )
        return SubmissionResult(
            entry_id=entry.get("id"),
            entry_date=entry_date,
            summaries=summaries,
        )

    async def history(self, identity: Identity, limit: Optional[int] = None) -> List[Dict]:
        """The caller's entries, newest first, at most ``limit`` (history_limit by default)."""
        limit = self.history_limit if limit is None else limit
        if limit < 1 or limit > self.max_history_limit:
            raise ValidationError(f"limit must be between 1 and {self.max_history_limit}")

        user = await self.resolve_user(identity)
        return await self.database.journals.get_recent(user["id"], limit=limit)

    async def dashboard(self, identity: Identity) -> List[Dict]:
        return await self.history(identity, limit=self.dashboard_limit)

    async def entry_for_date(self, identity: Identity, entry_date: date) -> Dict:
        user = await self.resolve_user(identity)
        entry = await self.database.journals.get_by_date(user["id"], entry_date)
        if entry is None:
            raise NotFoundError(f"No journal entry for {entry_date.isoformat()}")
        return entry
