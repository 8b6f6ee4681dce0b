from app.features.journaling.service import JournalService, SubmissionResult
from app.features.journaling.summaries import JournalSummaries, SummaryOrchestrator

__all__ = [
    "JournalService",
    "JournalSummaries",
    "SubmissionResult",
    "SummaryOrchestrator",
]
