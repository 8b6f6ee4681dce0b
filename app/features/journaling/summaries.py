"""
Summary generation for a journal entry.

Four independent requests go to the generative text service at once:
a one-line summary, a four-sentence summary, a full narrative and a
contentment score. They are joined before anything is returned; if any
of them fails the whole generation fails. The score is the only output
allowed to degrade: an unparsable reply becomes NEUTRAL_SCORE.
"""

import asyncio
import logging
import re
from typing import Optional

from pydantic import BaseModel

from app.core.tracing import get_tracer
from app.features.journaling.prompts import (
    CONTENTMENT_SCORE,
    FOUR_SENTENCE,
    FULL_NARRATIVE,
    ONE_LINE,
    SYSTEM_PROMPT,
    SummaryPrompt,
)
from app.services.llm import TextGenerator
from app.shared.errors import ConfigurationError, GenerationError

logger = logging.getLogger("QJournal.Journal.Summaries")
tracer = get_tracer(__name__)

MIN_SCORE = 0
MAX_SCORE = 10
NEUTRAL_SCORE = 5

_INTEGER = re.compile(r"[-+]?\d+")


class JournalSummaries(BaseModel):
    """Everything generated for one entry."""
    one_line_summary: str
    four_sentence_summary: str
    full_summary: str
    contentment_score: int


def clamp_score(score: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def parse_contentment_score(raw: Optional[str]) -> int:
    """
    Read the score out of the model's reply.

    The first integer in the reply wins and is clamped to 0..10. A reply
    with no integer in it gives NEUTRAL_SCORE.
    """
    match = _INTEGER.search(raw or "")
    if not match:
        logger.warning("Unparsable contentment score %r, using %d", (raw or "")[:20], NEUTRAL_SCORE)
        return NEUTRAL_SCORE
    score = int(match.group())
    clamped = clamp_score(score)
    if clamped != score:
        logger.warning("Contentment score %d out of range, clamped to %d", score, clamped)
    return clamped


class SummaryOrchestrator:
    """Fans one transcript out to the four summary requests."""

    def __init__(self, generator: TextGenerator) -> None:
        self.generator = generator

    async def _run(self, prompt: SummaryPrompt, transcript: str) -> str:
        return await self.generator.complete(
            system=SYSTEM_PROMPT,
            prompt=prompt.render(transcript),
            max_tokens=prompt.max_tokens,
            purpose=prompt.purpose,
        )

    async def generate(self, transcript: str) -> JournalSummaries:
        """
        Generate all summaries for ``transcript``.

        Raises:
            GenerationError: any of the four requests failed
            ConfigurationError: the generative service has no credentials
        """
        with tracer.start_as_current_span("journal.generate_summaries") as span:
            span.set_attribute("journal.transcript_chars", len(transcript))

            results = await asyncio.gather(
                self._run(ONE_LINE, transcript),
                self._run(FOUR_SENTENCE, transcript),
                self._run(FULL_NARRATIVE, transcript),
                self._run(CONTENTMENT_SCORE, transcript),
                return_exceptions=True,
            )

            failures = [result for result in results if isinstance(result, BaseException)]
            if failures:
                for failure in failures:
                    if isinstance(failure, ConfigurationError):
                        raise failure
                first = failures[0]
                logger.error(
                    "%d of %d summary requests failed: %s",
                    len(failures),
                    len(results),
                    first,
                )
                if isinstance(first, GenerationError):
                    raise first
                raise GenerationError(f"Summary generation failed: {first}") from first

            one_line, four_sentence, full_summary, raw_score = results
            summaries = JournalSummaries(
                one_line_summary=one_line,
                four_sentence_summary=four_sentence,
                full_summary=full_summary,
                contentment_score=parse_contentment_score(raw_score),
            )
            span.set_attribute("journal.contentment_score", summaries.contentment_score)
            return summaries
