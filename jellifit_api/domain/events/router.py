"""Event router - FastAPI endpoints for event operations"""

import logging

from fastapi import APIRouter, Depends, status

from ..dependencies import get_shared_adaptor, require_json
from ...state import SharedAdaptor
from .schemas import EventInput, EventResponse
from .service import EventService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/event", tags=["event"])


def get_event_service(shared: SharedAdaptor = Depends(get_shared_adaptor)) -> EventService:
    """Dependency injection for EventService"""
    return EventService(shared)


@router.get(
    "/{event_id}",
    response_model=EventResponse,
    responses={404: {"description": "Not found"}, 429: {"description": "Too many requests"}},
)
async def get_event(event_id: str, service: EventService = Depends(get_event_service)):
    """Get details about an event"""
    event = await service.get_event(event_id)
    return EventResponse.from_event(event)


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_json)],
    responses={
        415: {"description": "Unsupported input format"},
        422: {"description": "Invalid input provided"},
        429: {"description": "Too many requests"},
    },
)
async def create_event(data: EventInput, service: EventService = Depends(get_event_service)):
    """Create a new event"""
    event = await service.create_event(data)
    return EventResponse.from_event(event)
