"""Stats router"""

from fastapi import APIRouter, Depends

from ... import __version__
from ..dependencies import get_shared_adaptor
from ...state import SharedAdaptor
from .schemas import StatsResponse
from .service import StatsService

router = APIRouter(prefix="/stats", tags=["info"])


def get_stats_service(shared: SharedAdaptor = Depends(get_shared_adaptor)) -> StatsService:
    return StatsService(shared)


@router.get("", response_model=StatsResponse, responses={429: {"description": "Too many requests"}})
async def get_stats(service: StatsService = Depends(get_stats_service)):
    """Get current stats"""
    stats = await service.get_stats()
    return StatsResponse(
        event_count=stats.event_count, person_count=stats.person_count, version=__version__
    )
