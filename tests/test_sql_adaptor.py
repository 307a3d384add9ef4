import logging
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, text

from jellifit_api.adaptors.sql import SqlAdaptor
from jellifit_api.database import log_slow_queries
from jellifit_api.errors import EventIdConflictError

from tests.conftest import make_event


@pytest.fixture
async def sql_adaptor():
    adaptor = SqlAdaptor("sqlite://")
    await adaptor.setup()
    yield adaptor
    await adaptor.close()


async def test_create_and_get_event(sql_adaptor, now):
    created = await sql_adaptor.create_event(make_event("lunch-123456", now, name="Lunch"))
    assert created.id == "lunch-123456"

    fetched = await sql_adaptor.get_event("lunch-123456")
    assert fetched.name == "Lunch"
    assert fetched.times == ["0900-01012030", "0915-01012030"]
    assert fetched.timezone == "Pacific/Auckland"
    assert fetched.created_at == now
    assert fetched.visited_at.tzinfo is not None


async def test_get_event_advances_visited_at(sql_adaptor):
    long_ago = datetime(2000, 1, 1, tzinfo=timezone.utc)
    await sql_adaptor.create_event(make_event("old-123456", long_ago))

    fetched = await sql_adaptor.get_event("old-123456")
    assert fetched.visited_at > long_ago


async def test_get_missing_event(sql_adaptor):
    assert await sql_adaptor.get_event("missing-123456") is None


async def test_duplicate_event_id_conflicts(sql_adaptor, now):
    await sql_adaptor.create_event(make_event("lunch-123456", now))
    with pytest.raises(EventIdConflictError):
        await sql_adaptor.create_event(make_event("lunch-123456", now, name="Other"))


async def test_stats_counters(sql_adaptor):
    assert (await sql_adaptor.get_stats()).event_count == 0

    await sql_adaptor.increment_stat_event_count()
    await sql_adaptor.increment_stat_event_count()
    await sql_adaptor.increment_stat_person_count()

    stats = await sql_adaptor.get_stats()
    assert stats.event_count == 2
    assert stats.person_count == 1


async def test_person_upsert(sql_adaptor, now):
    await sql_adaptor.create_event(make_event("lunch-123456", now))

    created = await sql_adaptor.update_person("lunch-123456", "Ana", ["a"], password_hash="hash")
    assert created.password_hash == "hash"

    updated = await sql_adaptor.update_person("lunch-123456", "Ana", ["b", "c"], password_hash="other")
    assert updated.availability == ["b", "c"]
    assert updated.password_hash == "hash"

    assert await sql_adaptor.get_person("lunch-123456", "ana") is None
    people = await sql_adaptor.get_people("lunch-123456")
    assert [(p.name, p.availability) for p in people] == [("Ana", ["b", "c"])]


async def test_delete_events_cascades_to_people(sql_adaptor, now):
    await sql_adaptor.create_event(make_event("stale-111111", now - timedelta(days=91)))
    await sql_adaptor.create_event(make_event("boundary-222222", now - timedelta(days=90)))
    await sql_adaptor.create_event(make_event("fresh-333333", now - timedelta(days=1)))
    for name in ("Ana", "Ben"):
        await sql_adaptor.update_person("stale-111111", name, [])
    await sql_adaptor.update_person("fresh-333333", "Cy", [])

    result = await sql_adaptor.delete_events(now - timedelta(days=90))

    assert (result.event_count, result.person_count) == (1, 2)
    assert await sql_adaptor.get_people("stale-111111") == []
    assert len(await sql_adaptor.get_people("fresh-333333")) == 1
    assert await sql_adaptor.get_event("boundary-222222") is not None


def test_slow_queries_are_logged(caplog):
    engine = create_engine("sqlite://")
    log_slow_queries(engine, threshold=-1.0)

    with caplog.at_level(logging.WARNING, logger="jellifit_api.database"):
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    assert "Slow query on sqlite" in caplog.text
    assert "SELECT 1" in caplog.text
    engine.dispose()
