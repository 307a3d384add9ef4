"""
Storage adaptor contract

Every orchestrator reaches storage through these operations only. Concrete
adaptors raise AdaptorError (never a backend-specific exception) on failure.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..entities import DeleteResult, Event, Person, Stats


class Adaptor(ABC):
    """Abstract storage backend"""

    async def setup(self) -> None:
        """Prepare the backend (create tables, open connections)"""

    async def close(self) -> None:
        """Release backend resources"""

    @abstractmethod
    async def get_stats(self) -> Stats: ...

    @abstractmethod
    async def increment_stat_event_count(self) -> None: ...

    @abstractmethod
    async def increment_stat_person_count(self) -> None: ...

    @abstractmethod
    async def get_people(self, event_id: str) -> list[Person]: ...

    @abstractmethod
    async def get_person(self, event_id: str, name: str) -> Optional[Person]: ...

    @abstractmethod
    async def update_person(
        self,
        event_id: str,
        name: str,
        availability: list[str],
        password_hash: Optional[str] = None,
    ) -> Person:
        """
        Insert or update a person's availability.

        ``password_hash`` is only stored when the person is created.
        """

    @abstractmethod
    async def get_event(self, event_id: str) -> Optional[Event]:
        """Fetch an event, advancing its visited_at when it exists"""

    @abstractmethod
    async def create_event(self, event: Event) -> Event:
        """
        Store a fully formed event.

        Raises:
            EventIdConflictError: if an event with the same id already exists
        """

    @abstractmethod
    async def delete_events(self, before: datetime) -> DeleteResult:
        """Delete events last visited strictly before ``before``, with their people"""
