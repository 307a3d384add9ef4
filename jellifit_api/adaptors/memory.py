"""In-process storage, used for development and tests"""

import logging
from copy import deepcopy
from datetime import datetime, timezone
from typing import Optional

from ..entities import DeleteResult, Event, Person, Stats
from ..errors import EventIdConflictError
from .base import Adaptor

logger = logging.getLogger(__name__)


class MemoryAdaptor(Adaptor):
    """Keeps everything in dictionaries; data is lost on restart"""

    def __init__(self):
        self.events: dict[str, Event] = {}
        # event id -> person name -> person
        self.people: dict[str, dict[str, Person]] = {}
        self.stats = Stats()

    async def setup(self) -> None:
        logger.warning("Using in-memory storage - data will not survive a restart")

    async def get_stats(self) -> Stats:
        return deepcopy(self.stats)

    async def increment_stat_event_count(self) -> None:
        self.stats.event_count += 1

    async def increment_stat_person_count(self) -> None:
        self.stats.person_count += 1

    async def get_people(self, event_id: str) -> list[Person]:
        return [deepcopy(p) for p in self.people.get(event_id, {}).values()]

    async def get_person(self, event_id: str, name: str) -> Optional[Person]:
        person = self.people.get(event_id, {}).get(name)
        return deepcopy(person) if person else None

    async def update_person(
        self,
        event_id: str,
        name: str,
        availability: list[str],
        password_hash: Optional[str] = None,
    ) -> Person:
        people = self.people.setdefault(event_id, {})
        person = people.get(name)
        if person is None:
            person = Person(
                name=name,
                created_at=datetime.now(timezone.utc),
                password_hash=password_hash,
            )
            people[name] = person
        person.availability = list(availability)
        return deepcopy(person)

    async def get_event(self, event_id: str) -> Optional[Event]:
        event = self.events.get(event_id)
        if event is None:
            return None
        event.visited_at = datetime.now(timezone.utc)
        return deepcopy(event)

    async def create_event(self, event: Event) -> Event:
        if event.id in self.events:
            raise EventIdConflictError()
        self.events[event.id] = deepcopy(event)
        return deepcopy(event)

    async def delete_events(self, before: datetime) -> DeleteResult:
        result = DeleteResult()
        for event_id in [e.id for e in self.events.values() if e.visited_at < before]:
            del self.events[event_id]
            result.event_count += 1
            result.person_count += len(self.people.pop(event_id, {}))
        return result
