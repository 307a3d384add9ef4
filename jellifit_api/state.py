"""
Shared access to the storage adaptor

The application holds exactly one adaptor. Orchestrators borrow it through
``SharedAdaptor.acquire()``; only one borrower holds it at a time and waiters
are resumed in the order they asked.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from .adaptors.base import Adaptor

logger = logging.getLogger(__name__)


class SharedAdaptor:
    """Mutually exclusive handle around the application's adaptor"""

    def __init__(self, adaptor: Adaptor):
        self._adaptor = adaptor
        self._lock = asyncio.Lock()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Adaptor]:
        async with self._lock:
            yield self._adaptor

    async def setup(self) -> None:
        await self._adaptor.setup()

    async def close(self) -> None:
        async with self._lock:
            await self._adaptor.close()
