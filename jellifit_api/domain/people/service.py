"""Person service - attendee availability within an event"""

import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from ...entities import Person
from ...errors import AdaptorError, NotAuthorizedError, NotFoundError
from ...security_utils import hash_password_bcrypt, verify_password_bcrypt
from ...state import SharedAdaptor
from .schemas import PersonInput

logger = logging.getLogger(__name__)


class PersonService:
    """Service layer for person business logic"""

    def __init__(self, shared: SharedAdaptor):
        self.shared = shared

    async def get_people(self, event_id: str) -> list[Person]:
        async with self.shared.acquire() as adaptor:
            if await adaptor.get_event(event_id) is None:
                raise NotFoundError("Event not found")
            return await adaptor.get_people(event_id)

    async def get_person(self, event_id: str, name: str) -> Person:
        async with self.shared.acquire() as adaptor:
            if await adaptor.get_event(event_id) is None:
                raise NotFoundError("Event not found")
            person = await adaptor.get_person(event_id, name)
        if person is None:
            raise NotFoundError("Person not found")
        return person

    async def update_person(
        self, event_id: str, name: str, data: PersonInput, password: Optional[str] = None
    ) -> Person:
        """
        Create the person or replace their availability.

        A person created with a password can only be updated by presenting
        the same password again. Hashing and verification run in the
        threadpool while the shared adaptor is released; the stored hash is
        re-read before writing and checked again if it changed meanwhile.
        """
        password_hash = await run_in_threadpool(hash_password_bcrypt, password) if password else None
        verified_hash: Optional[str] = None

        while True:
            async with self.shared.acquire() as adaptor:
                if await adaptor.get_event(event_id) is None:
                    raise NotFoundError("Event not found")

                existing = await adaptor.get_person(event_id, name)
                stored_hash = existing.password_hash if existing else None
                if stored_hash == verified_hash:
                    person = await adaptor.update_person(
                        event_id, name, data.availability, password_hash=password_hash
                    )
                    if existing is None:
                        logger.info(f"Added person '{name}' to event {event_id}")
                        await self._count_new_person(adaptor, event_id)
                    return person

            await self._check_password(event_id, name, password, stored_hash)
            verified_hash = stored_hash

    async def _check_password(
        self, event_id: str, name: str, password: Optional[str], stored_hash: str
    ) -> None:
        if password and await run_in_threadpool(verify_password_bcrypt, password, stored_hash):
            return
        logger.warning(f"🔒 Rejected update of person '{name}' in event {event_id}")
        raise NotAuthorizedError("Incorrect password")

    async def _count_new_person(self, adaptor, event_id: str) -> None:
        try:
            await adaptor.increment_stat_person_count()
        except AdaptorError as e:
            logger.warning(f"⚠️ Person counter not updated for event {event_id}: {e}")
