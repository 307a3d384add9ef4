import asyncio
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from jellifit_api.adaptors.memory import MemoryAdaptor
from jellifit_api.entities import Event
from jellifit_api.main import create_app
from jellifit_api.rate_limiter import MemoryTokenBuckets, RateLimiter
from jellifit_api.state import SharedAdaptor


class ConcurrencyProbeAdaptor(MemoryAdaptor):
    """Memory adaptor that yields inside every call and records overlapping calls"""

    def __init__(self):
        super().__init__()
        self.in_flight = 0
        self.max_in_flight = 0

    async def _enter(self):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)

    def _exit(self):
        self.in_flight -= 1

    async def get_event(self, event_id):
        await self._enter()
        try:
            return await super().get_event(event_id)
        finally:
            self._exit()

    async def create_event(self, event):
        await self._enter()
        try:
            return await super().create_event(event)
        finally:
            self._exit()

    async def increment_stat_event_count(self):
        await self._enter()
        try:
            return await super().increment_stat_event_count()
        finally:
            self._exit()


def make_event(event_id: str, visited_at: datetime, name: str = "Test Event") -> Event:
    return Event(
        id=event_id,
        name=name,
        created_at=visited_at,
        visited_at=visited_at,
        times=["0900-01012030", "0915-01012030"],
        timezone="Pacific/Auckland",
    )


@pytest.fixture
def adaptor():
    return MemoryAdaptor()


@pytest.fixture
def shared(adaptor):
    return SharedAdaptor(adaptor)


@pytest.fixture
def now():
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def client(adaptor):
    app = create_app(
        adaptor=adaptor,
        rate_limiter=RateLimiter(MemoryTokenBuckets(20, 0.5), enabled=False),
    )
    with TestClient(app) as test_client:
        yield test_client
