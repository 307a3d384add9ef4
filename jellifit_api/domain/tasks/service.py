"""
Retention sweep

Events that nobody has opened for ``RETENTION_DAYS`` are deleted together
with their people. The task is triggered by an external scheduler calling
``GET /tasks/cleanup``; a shared secret guards it when ``CRON_KEY`` is set.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from ...entities import DeleteResult
from ...errors import NotAuthorizedError
from ...security_utils import constant_time_compare
from ...state import SharedAdaptor

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, shared: SharedAdaptor, cron_key: str = "", retention_days: int = 90):
        self.shared = shared
        self.cron_key = cron_key
        self.retention_days = retention_days

    def authorize(self, presented_key: Optional[str]) -> None:
        """Require the configured cron key, if there is one"""
        if not self.cron_key:
            return
        if not constant_time_compare(presented_key, self.cron_key):
            logger.warning("🔒 Cleanup rejected: missing or incorrect X-Cron-Key")
            raise NotAuthorizedError("Missing or incorrect X-Cron-Key header")

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        now = now or datetime.now(timezone.utc)
        return now - timedelta(days=self.retention_days)

    async def cleanup(self, presented_key: Optional[str], now: Optional[datetime] = None) -> DeleteResult:
        self.authorize(presented_key)

        before = self.cutoff(now)
        logger.info(f"Running cleanup task (events not visited since {before.isoformat()})")

        async with self.shared.acquire() as adaptor:
            result = await adaptor.delete_events(before)

        logger.info(
            f"Cleanup successful: {result.event_count} events and {result.person_count} people removed"
        )
        return result
