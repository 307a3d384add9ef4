from pydantic import BaseModel


class StatsResponse(BaseModel):
    event_count: int
    person_count: int
    version: str
