"""Person domain schemas"""

from pydantic import BaseModel, Field

from ...entities import Person


class PersonInput(BaseModel):
    """Replacement availability for a person"""

    availability: list[str]


class PersonResponse(BaseModel):
    name: str
    availability: list[str]
    created_at: int = Field(description="Unix timestamp in seconds")

    @classmethod
    def from_person(cls, person: Person) -> "PersonResponse":
        return cls(
            name=person.name,
            availability=person.availability,
            created_at=int(person.created_at.timestamp()),
        )
