from datetime import date

import pytest

from app.features.auth.keycloak import Identity
from app.features.journaling.prompts import CONTENTMENT_SCORE, FOUR_SENTENCE
from app.features.journaling.service import JournalService
from app.features.journaling.summaries import SummaryOrchestrator
from app.shared.errors import AnalysisError, GenerationError, NotFoundError, ValidationError
from tests.fakes import ScriptedGenerator, server_error

JAN_15 = date(2024, 1, 15)


async def test_submission_stores_one_entry(service, identity, supabase):
    result = await service.submit(identity, {"mood": "tired but okay", "gratitude": "sunshine"}, JAN_15)

    rows = supabase.rows("journal_entries")
    assert len(rows) == 1
    assert rows[0]["entry_date"] == "2024-01-15"
    assert rows[0]["answers"] == {"mood": "tired but okay", "gratitude": "sunshine"}
    assert 0 < len(rows[0]["one_line_summary"].split()) <= 15
    assert 0 <= rows[0]["contentment_score"] <= 10
    assert result.summaries.full_summary.startswith("Today you felt")


async def test_resubmission_overwrites_rather_than_merges(service, identity, supabase):
    await service.submit(identity, {"mood": "tired but okay", "gratitude": "sunshine"}, JAN_15)
    await service.submit(identity, {"mood": "great!"}, JAN_15)

    rows = supabase.rows("journal_entries")
    assert len(rows) == 1
    assert rows[0]["answers"] == {"mood": "great!"}


async def test_blank_answers_are_neither_sent_nor_stored(service, identity, generator, supabase):
    await service.submit(identity, {"mood": "great!", "gratitude": "   "}, JAN_15)

    assert all("Gratitude" not in call["prompt"] for call in generator.calls)
    assert supabase.rows("journal_entries")[0]["answers"] == {"mood": "great!"}


async def test_entry_date_defaults_to_today(service, identity, supabase):
    result = await service.submit(identity, {"mood": "ok"})

    assert result.entry_date == date.today()
    assert supabase.rows("journal_entries")[0]["entry_date"] == date.today().isoformat()


@pytest.mark.parametrize("answers", [None, {}, {"mood": "  ", "sleep": ""}])
async def test_missing_or_empty_answers_are_rejected_before_any_call(service, identity, generator, supabase, answers):
    with pytest.raises(ValidationError):
        await service.submit(identity, answers, JAN_15)

    assert generator.calls == []
    assert supabase.calls == []


async def test_failed_generation_stores_nothing(database, identity, supabase):
    generator = ScriptedGenerator({FOUR_SENTENCE.purpose: GenerationError("service unreachable")})
    service = JournalService(database, SummaryOrchestrator(generator))

    with pytest.raises(AnalysisError) as excinfo:
        await service.submit(identity, {"mood": "ok"}, JAN_15)

    assert excinfo.value.details == {"cause": "GENERATION_ERROR"}
    assert "service unreachable" in excinfo.value.message
    assert supabase.rows("journal_entries") == []
    assert supabase.writes("journal_entries") == 0


async def test_failed_write_is_reported_after_generation(service, identity, generator, supabase):
    supabase.fail("journal_entries", "upsert", server_error())

    with pytest.raises(AnalysisError) as excinfo:
        await service.submit(identity, {"mood": "ok"}, JAN_15)

    assert excinfo.value.details == {"cause": "DATABASE_ERROR"}
    assert len(generator.calls) == 4
    assert supabase.rows("journal_entries") == []


async def test_score_reply_without_a_number_is_stored_as_neutral(database, identity, supabase):
    generator = ScriptedGenerator({CONTENTMENT_SCORE.purpose: "I'd say fairly content"})
    service = JournalService(database, SummaryOrchestrator(generator))

    await service.submit(identity, {"mood": "fine"}, JAN_15)

    assert supabase.rows("journal_entries")[0]["contentment_score"] == 5


async def test_first_request_creates_user_and_later_ones_reuse_it(service, identity, supabase):
    await service.submit(identity, {"mood": "ok"}, date(2024, 1, 14))
    await service.submit(identity, {"mood": "ok"}, JAN_15)
    await service.history(identity)

    users = supabase.rows("users")
    assert len(users) == 1
    assert users[0]["keycloak_sub"] == identity.subject
    assert users[0]["name"] == "Sam Rivera"


async def test_history_is_newest_first_and_bounded(service, identity):
    for day in range(1, 6):
        await service.submit(identity, {"mood": f"day {day}"}, date(2024, 1, day))

    everything = await service.history(identity)
    latest_two = await service.history(identity, limit=2)

    assert [row["entry_date"] for row in everything] == [
        "2024-01-05", "2024-01-04", "2024-01-03", "2024-01-02", "2024-01-01",
    ]
    assert [row["entry_date"] for row in latest_two] == ["2024-01-05", "2024-01-04"]


async def test_dashboard_is_bounded_to_ten(service, identity):
    for day in range(1, 13):
        await service.submit(identity, {"mood": f"day {day}"}, date(2024, 1, day))

    rows = await service.dashboard(identity)

    assert len(rows) == 10
    assert rows[0]["entry_date"] == "2024-01-12"


async def test_history_only_returns_the_callers_entries(service, identity):
    other = Identity(subject="someone-else")
    await service.submit(identity, {"mood": "mine"}, JAN_15)
    await service.submit(other, {"mood": "theirs"}, JAN_15)

    rows = await service.history(identity)

    assert [row["answers"] for row in rows] == [{"mood": "mine"}]


@pytest.mark.parametrize("limit", [0, -1, 366])
async def test_history_limit_out_of_range_is_rejected(service, identity, limit):
    with pytest.raises(ValidationError):
        await service.history(identity, limit=limit)


async def test_entry_for_missing_date_is_not_found(service, identity):
    with pytest.raises(NotFoundError):
        await service.entry_for_date(identity, JAN_15)
