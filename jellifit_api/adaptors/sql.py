"""SQLAlchemy storage adaptor (PostgreSQL, MySQL, SQLite)"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from fastapi.concurrency import run_in_threadpool

from ..database import Base, create_db_engine, create_session_factory
from ..entities import DeleteResult, Event, Person, Stats
from ..errors import AdaptorError, EventIdConflictError
from ..models import EventRecord, PersonRecord, StatsRecord
from .base import Adaptor

logger = logging.getLogger(__name__)

STATS_ROW_ID = 1


def _utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _to_event(record: EventRecord) -> Event:
    return Event(
        id=record.id,
        name=record.name,
        created_at=_utc(record.created_at),
        visited_at=_utc(record.visited_at),
        times=list(record.times or []),
        timezone=record.timezone,
    )


def _to_person(record: PersonRecord) -> Person:
    return Person(
        name=record.name,
        created_at=_utc(record.created_at),
        availability=list(record.availability or []),
        password_hash=record.password_hash,
    )


class SqlAdaptor(Adaptor):
    """
    Blocking SQLAlchemy sessions run in the threadpool so the event loop
    stays free. Each operation uses its own session and transaction.
    """

    def __init__(self, database_url: str):
        self.engine = create_db_engine(database_url)
        self.SessionLocal = create_session_factory(self.engine)

    async def _run(self, operation: str, fn, *args):
        try:
            return await run_in_threadpool(fn, *args)
        except SQLAlchemyError as e:
            logger.error(f"❌ Database error during {operation}: {e}")
            raise AdaptorError() from e

    async def setup(self) -> None:
        def _create_tables():
            Base.metadata.create_all(bind=self.engine, checkfirst=True)
            with self.SessionLocal() as db:
                self._stats_row(db)
                db.commit()

        await self._run("setup", _create_tables)
        logger.info("Database tables ready")

    async def close(self) -> None:
        await run_in_threadpool(self.engine.dispose)

    # Stats

    def _stats_row(self, db: Session) -> StatsRecord:
        row = db.get(StatsRecord, STATS_ROW_ID)
        if row is None:
            row = StatsRecord(id=STATS_ROW_ID, event_count=0, person_count=0)
            db.add(row)
            db.flush()
        return row

    async def get_stats(self) -> Stats:
        def _get():
            with self.SessionLocal() as db:
                row = db.get(StatsRecord, STATS_ROW_ID)
                if row is None:
                    return Stats()
                return Stats(event_count=row.event_count, person_count=row.person_count)

        return await self._run("get_stats", _get)

    async def increment_stat_event_count(self) -> None:
        def _increment():
            with self.SessionLocal() as db:
                row = self._stats_row(db)
                row.event_count = StatsRecord.event_count + 1
                db.commit()

        await self._run("increment_stat_event_count", _increment)

    async def increment_stat_person_count(self) -> None:
        def _increment():
            with self.SessionLocal() as db:
                row = self._stats_row(db)
                row.person_count = StatsRecord.person_count + 1
                db.commit()

        await self._run("increment_stat_person_count", _increment)

    # People

    async def get_people(self, event_id: str) -> list[Person]:
        def _get():
            with self.SessionLocal() as db:
                records = db.scalars(
                    select(PersonRecord)
                    .where(PersonRecord.event_id == event_id)
                    .order_by(PersonRecord.created_at)
                ).all()
                return [_to_person(r) for r in records]

        return await self._run("get_people", _get)

    async def get_person(self, event_id: str, name: str) -> Optional[Person]:
        def _get():
            with self.SessionLocal() as db:
                record = db.get(PersonRecord, (event_id, name))
                return _to_person(record) if record else None

        return await self._run("get_person", _get)

    async def update_person(
        self,
        event_id: str,
        name: str,
        availability: list[str],
        password_hash: Optional[str] = None,
    ) -> Person:
        def _upsert():
            with self.SessionLocal() as db:
                record = db.get(PersonRecord, (event_id, name))
                if record is None:
                    record = PersonRecord(
                        event_id=event_id,
                        name=name,
                        password_hash=password_hash,
                        created_at=datetime.now(timezone.utc),
                    )
                    db.add(record)
                record.availability = list(availability)
                db.commit()
                return _to_person(record)

        return await self._run("update_person", _upsert)

    # Events

    async def get_event(self, event_id: str) -> Optional[Event]:
        def _get():
            with self.SessionLocal() as db:
                record = db.get(EventRecord, event_id)
                if record is None:
                    return None
                record.visited_at = datetime.now(timezone.utc)
                db.commit()
                return _to_event(record)

        return await self._run("get_event", _get)

    async def create_event(self, event: Event) -> Event:
        def _create():
            with self.SessionLocal() as db:
                record = EventRecord(
                    id=event.id,
                    name=event.name,
                    created_at=event.created_at,
                    visited_at=event.visited_at,
                    times=list(event.times),
                    timezone=event.timezone,
                )
                db.add(record)
                try:
                    db.commit()
                except IntegrityError as e:
                    db.rollback()
                    raise EventIdConflictError() from e
                return _to_event(record)

        return await self._run("create_event", _create)

    async def delete_events(self, before: datetime) -> DeleteResult:
        def _delete():
            with self.SessionLocal() as db:
                stale_ids = select(EventRecord.id).where(EventRecord.visited_at < before)
                person_count = db.scalar(
                    select(func.count()).select_from(PersonRecord).where(
                        PersonRecord.event_id.in_(stale_ids)
                    )
                )
                # People first, then their events
                db.execute(delete(PersonRecord).where(PersonRecord.event_id.in_(stale_ids)))
                event_count = db.execute(
                    delete(EventRecord).where(EventRecord.visited_at < before)
                ).rowcount
                db.commit()
                return DeleteResult(event_count=event_count or 0, person_count=person_count or 0)

        return await self._run("delete_events", _delete)
