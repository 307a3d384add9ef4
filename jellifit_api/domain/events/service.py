"""Event service - creation and lookup of events"""

import logging
from datetime import datetime, timezone

from ... import config
from ...entities import Event
from ...errors import AdaptorError, EventIdConflictError, IdentifierExhaustedError, NotFoundError
from ...identifiers import allocate_event_id, generate_name
from ...state import SharedAdaptor
from .schemas import EventInput

logger = logging.getLogger(__name__)


class EventService:
    """Service layer for event business logic"""

    def __init__(self, shared: SharedAdaptor, max_id_attempts: int = config.ID_ALLOCATION_MAX_ATTEMPTS):
        self.shared = shared
        self.max_id_attempts = max_id_attempts

    async def get_event(self, event_id: str) -> Event:
        async with self.shared.acquire() as adaptor:
            event = await adaptor.get_event(event_id)
        if event is None:
            raise NotFoundError("Event not found")
        return event

    async def create_event(self, data: EventInput) -> Event:
        """
        Create an event under a freshly allocated identifier.

        The identifier probe and the write happen under one hold of the
        shared adaptor. A conflict reported by the write itself starts a new
        allocation, at most ``max_id_attempts`` times.
        """
        name = data.name.strip() if data.name and data.name.strip() else generate_name()
        now = datetime.now(timezone.utc)
        conflicts_left = self.max_id_attempts

        async with self.shared.acquire() as adaptor:
            while True:
                event_id = await allocate_event_id(adaptor, name, self.max_id_attempts)
                try:
                    event = await adaptor.create_event(
                        Event(
                            id=event_id,
                            name=name,
                            created_at=now,
                            visited_at=now,
                            times=list(data.times),
                            timezone=data.timezone,
                        )
                    )
                    break
                except EventIdConflictError:
                    conflicts_left -= 1
                    logger.warning(f"Event id {event_id} was taken at write time, reallocating")
                    if conflicts_left <= 0:
                        raise IdentifierExhaustedError() from None

            try:
                await adaptor.increment_stat_event_count()
            except AdaptorError as e:
                logger.warning(f"⚠️ Event {event.id} created but event counter not updated: {e}")

        logger.info(f"📥 Created event {event.id}")
        return event
