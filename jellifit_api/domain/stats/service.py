from ...entities import Stats
from ...state import SharedAdaptor


class StatsService:
    def __init__(self, shared: SharedAdaptor):
        self.shared = shared

    async def get_stats(self) -> Stats:
        async with self.shared.acquire() as adaptor:
            return await adaptor.get_stats()
