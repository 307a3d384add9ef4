"""Event domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field

from ...entities import TEXT_MAX_LENGTH, Event


class EventInput(BaseModel):
    """New event details"""

    name: Optional[str] = Field(
        None, max_length=TEXT_MAX_LENGTH, description="Display name, generated when blank"
    )
    times: list[str]
    timezone: str = Field(max_length=TEXT_MAX_LENGTH)


class EventResponse(BaseModel):
    id: str
    name: str
    times: list[str]
    timezone: str
    created_at: int = Field(description="Unix timestamp in seconds")

    @classmethod
    def from_event(cls, event: Event) -> "EventResponse":
        return cls(
            id=event.id,
            name=event.name,
            times=event.times,
            timezone=event.timezone,
            created_at=int(event.created_at.timestamp()),
        )
