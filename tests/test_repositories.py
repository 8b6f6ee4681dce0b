from datetime import date

import httpx
import pytest

from app.shared.errors import PersistenceError
from tests.fakes import server_error


# =============================================================================
# USERS
# =============================================================================

async def test_first_sight_creates_exactly_one_user(database, supabase):
    user = await database.users.get_or_create("kc-1", "sam@example.com", "Sam")

    assert user["keycloak_sub"] == "kc-1"
    assert len(supabase.rows("users")) == 1


async def test_known_identity_reuses_its_row(database, supabase):
    first = await database.users.get_or_create("kc-1", "sam@example.com", "Sam")
    second = await database.users.get_or_create("kc-1", "sam@example.com", "Sam")

    assert second["id"] == first["id"]
    assert len(supabase.rows("users")) == 1


async def test_concurrent_creation_falls_back_to_the_winning_row(database, supabase):
    def competing_insert():
        supabase.rows("users").append({"id": 99, "keycloak_sub": "kc-1", "email": None, "name": None})

    supabase.before[("users", "insert")] = competing_insert

    user = await database.users.get_or_create("kc-1", None, None)

    assert user["id"] == 99
    assert len(supabase.rows("users")) == 1


async def test_changed_claims_refresh_name_and_email(database, supabase):
    await database.users.get_or_create("kc-1", "old@example.com", "Sam")

    user = await database.users.get_or_create("kc-1", "new@example.com", "Sam R.")

    assert user["email"] == "new@example.com"
    assert user["name"] == "Sam R."
    assert supabase.rows("users")[0]["email"] == "new@example.com"


async def test_missing_claims_do_not_blank_stored_profile(database, supabase):
    await database.users.get_or_create("kc-1", "sam@example.com", "Sam")

    user = await database.users.get_or_create("kc-1", None, None)

    assert user["email"] == "sam@example.com"
    assert supabase.writes("users") == 1


# =============================================================================
# JOURNAL ENTRIES
# =============================================================================

async def _upsert(database, user_id, day, answers, one_line="line", score=5):
    return await database.journals.upsert(
        user_id=user_id,
        entry_date=day,
        answers=answers,
        one_line_summary=one_line,
        four_sentence_summary="four",
        contentment_score=score,
    )


async def test_resubmission_replaces_the_whole_entry(database, supabase):
    day = date(2024, 1, 15)
    first = await _upsert(database, 1, day, {"mood": "tired but okay", "gratitude": "sunshine"}, "first", 4)

    second = await _upsert(database, 1, day, {"mood": "great!"}, "second", 9)

    rows = supabase.rows("journal_entries")
    assert len(rows) == 1
    assert second["id"] == first["id"]
    assert rows[0]["answers"] == {"mood": "great!"}
    assert rows[0]["one_line_summary"] == "second"
    assert rows[0]["contentment_score"] == 9
    assert rows[0]["created_at"] >= first["created_at"]


async def test_upsert_is_a_single_write(database, supabase):
    await _upsert(database, 1, date(2024, 1, 15), {"mood": "ok"})

    assert supabase.calls == [("journal_entries", "upsert")]


async def test_entries_for_different_users_or_dates_do_not_collide(database, supabase):
    await _upsert(database, 1, date(2024, 1, 15), {"mood": "a"})
    await _upsert(database, 1, date(2024, 1, 16), {"mood": "b"})
    await _upsert(database, 2, date(2024, 1, 15), {"mood": "c"})

    assert len(supabase.rows("journal_entries")) == 3


async def test_recent_entries_are_newest_first(database):
    for day in (3, 1, 2):
        await _upsert(database, 1, date(2024, 1, day), {"mood": str(day)})
    await _upsert(database, 2, date(2024, 1, 9), {"mood": "other user"})

    entries = await database.journals.get_recent(1, limit=30)

    assert [e["entry_date"] for e in entries] == ["2024-01-03", "2024-01-02", "2024-01-01"]


async def test_recent_entries_are_truncated_to_the_most_recent(database):
    for day in range(1, 13):
        await _upsert(database, 1, date(2024, 1, day), {"mood": str(day)})

    entries = await database.journals.get_recent(1, limit=10)

    assert len(entries) == 10
    assert entries[0]["entry_date"] == "2024-01-12"
    assert entries[-1]["entry_date"] == "2024-01-03"


async def test_get_by_date(database):
    await _upsert(database, 1, date(2024, 1, 15), {"mood": "ok"})

    assert (await database.journals.get_by_date(1, date(2024, 1, 15)))["answers"] == {"mood": "ok"}
    assert await database.journals.get_by_date(1, date(2024, 1, 16)) is None


async def test_database_error_becomes_persistence_error(database, supabase):
    supabase.fail("journal_entries", "upsert", server_error())

    with pytest.raises(PersistenceError):
        await _upsert(database, 1, date(2024, 1, 15), {"mood": "ok"})

    assert supabase.rows("journal_entries") == []


async def test_unreachable_database_becomes_persistence_error(database, supabase):
    supabase.fail("users", "select", httpx.ConnectError("connection refused"))

    with pytest.raises(PersistenceError, match="unavailable"):
        await database.users.get_or_create("kc-1")


async def test_ping_reports_database_health(database, supabase):
    assert await database.ping() is True

    supabase.fail("users", "select", httpx.ConnectError("connection refused"))

    assert await database.ping() is False


async def test_close_releases_connections(database, supabase):
    await database.close()

    assert supabase.postgrest.closed is True
