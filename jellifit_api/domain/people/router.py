"""Person router - FastAPI endpoints for attendee availability"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Path

from ..dependencies import get_shared_adaptor, require_json
from ...entities import TEXT_MAX_LENGTH
from ...security_utils import password_from_authorization
from ...state import SharedAdaptor
from .schemas import PersonInput, PersonResponse
from .service import PersonService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/event/{event_id}/people", tags=["person"])


def get_person_service(shared: SharedAdaptor = Depends(get_shared_adaptor)) -> PersonService:
    """Dependency injection for PersonService"""
    return PersonService(shared)


@router.get(
    "",
    response_model=list[PersonResponse],
    responses={404: {"description": "Event not found"}, 429: {"description": "Too many requests"}},
)
async def get_people(event_id: str, service: PersonService = Depends(get_person_service)):
    """Get availabilities for all people in an event"""
    people = await service.get_people(event_id)
    return [PersonResponse.from_person(p) for p in people]


@router.get(
    "/{person_name}",
    response_model=PersonResponse,
    responses={404: {"description": "Event or person not found"}, 429: {"description": "Too many requests"}},
)
async def get_person(
    event_id: str, person_name: str, service: PersonService = Depends(get_person_service)
):
    """Get a single person's availability"""
    person = await service.get_person(event_id, person_name)
    return PersonResponse.from_person(person)


@router.patch(
    "/{person_name}",
    response_model=PersonResponse,
    dependencies=[Depends(require_json)],
    responses={
        401: {"description": "Missing or incorrect password"},
        404: {"description": "Event not found"},
        415: {"description": "Unsupported input format"},
        422: {"description": "Invalid input provided"},
        429: {"description": "Too many requests"},
    },
)
async def update_person(
    event_id: str,
    data: PersonInput,
    person_name: str = Path(max_length=TEXT_MAX_LENGTH),
    authorization: Optional[str] = Header(None),
    service: PersonService = Depends(get_person_service),
):
    """Create a person or update their availability"""
    password = password_from_authorization(authorization)
    person = await service.update_person(event_id, person_name, data, password)
    return PersonResponse.from_person(person)
