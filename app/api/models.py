import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =========================================================================
# JOURNAL MODELS
# =========================================================================

class AnalyzeRequest(_CamelModel):
    answers: Optional[Dict[str, Optional[str]]] = None
    entry_date: Optional[dt.date] = Field(default=None, alias="entryDate")


class AnalyzeResponse(_CamelModel):
    summary: str
    one_line_summary: str = Field(alias="oneLineSummary")
    four_sentence_summary: str = Field(alias="fourSentenceSummary")
    contentment_score: int = Field(alias="contentmentScore")
    entry_date: dt.date = Field(alias="entryDate")
    entry_id: Optional[int] = Field(default=None, alias="entryId")


class EntrySummary(_CamelModel):
    id: int
    date: dt.date
    one_line_summary: Optional[str] = Field(default=None, alias="oneLineSummary")
    four_sentence_summary: Optional[str] = Field(default=None, alias="fourSentenceSummary")
    contentment_score: Optional[int] = Field(default=None, alias="contentmentScore")

    @classmethod
    def from_row(cls, row: Dict) -> "EntrySummary":
        return cls(
            id=row["id"],
            date=row["entry_date"],
            one_line_summary=row.get("one_line_summary"),
            four_sentence_summary=row.get("four_sentence_summary"),
            contentment_score=row.get("contentment_score"),
        )


class EntryDetail(EntrySummary):
    answers: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Dict) -> "EntryDetail":
        return cls(
            **EntrySummary.from_row(row).model_dump(),
            answers=row.get("answers") or {},
        )


class EntriesResponse(BaseModel):
    entries: List[EntrySummary]


# =========================================================================
# USER MODELS
# =========================================================================

class UserResponse(BaseModel):
    id: int
    email: Optional[str] = None
    name: Optional[str] = None
