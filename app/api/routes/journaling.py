"""
Journaling API Routes

Submitting the day's answers and reading back past entries.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_current_identity, get_journal_service
from app.api.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    EntriesResponse,
    EntryDetail,
    EntrySummary,
)
from app.features.auth.keycloak import Identity
from app.features.journaling.service import JournalService

router = APIRouter(prefix="/journal", tags=["Journaling"])
logger = logging.getLogger("QJournal.API.Journal")


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_journal(
    request: AnalyzeRequest,
    identity: Identity = Depends(get_current_identity),
    service: JournalService = Depends(get_journal_service),
) -> AnalyzeResponse:
    """
    Summarize and store the day's journal answers.

    Returns the full narrative summary as ``summary`` plus the shorter
    summaries and the contentment score that were stored with the entry.
    Submitting again for the same date replaces the earlier entry.
    """
    result = await service.submit(identity, request.answers, request.entry_date)
    summaries = result.summaries
    return AnalyzeResponse(
        summary=summaries.full_summary,
        one_line_summary=summaries.one_line_summary,
        four_sentence_summary=summaries.four_sentence_summary,
        contentment_score=summaries.contentment_score,
        entry_date=result.entry_date,
        entry_id=result.entry_id,
    )


@router.get("/entries", response_model=EntriesResponse)
async def list_entries(
    limit: Optional[int] = Query(default=None),
    identity: Identity = Depends(get_current_identity),
    service: JournalService = Depends(get_journal_service),
) -> EntriesResponse:
    """The caller's entries, newest first."""
    rows = await service.history(identity, limit=limit)
    return EntriesResponse(entries=[EntrySummary.from_row(row) for row in rows])


@router.get("/dashboard", response_model=EntriesResponse)
async def dashboard_entries(
    identity: Identity = Depends(get_current_identity),
    service: JournalService = Depends(get_journal_service),
) -> EntriesResponse:
    """The handful of most recent entries shown on the dashboard."""
    rows = await service.dashboard(identity)
    return EntriesResponse(entries=[EntrySummary.from_row(row) for row in rows])


@router.get("/entries/{entry_date}", response_model=EntryDetail)
async def get_entry(
    entry_date: date,
    identity: Identity = Depends(get_current_identity),
    service: JournalService = Depends(get_journal_service),
) -> EntryDetail:
    """One entry, answers included."""
    row = await service.entry_for_date(identity, entry_date)
    return EntryDetail.from_row(row)
