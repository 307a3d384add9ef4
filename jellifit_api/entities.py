"""Storage-level records exchanged with adaptors"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

# Column sizes shared by request validation and SQL storage
ID_MAX_LENGTH = 255
TEXT_MAX_LENGTH = 255


@dataclass
class Event:
    id: str
    name: str
    created_at: datetime
    visited_at: datetime
    times: list[str] = field(default_factory=list)
    timezone: str = ""


@dataclass
class Person:
    name: str
    created_at: datetime
    availability: list[str] = field(default_factory=list)
    # bcrypt hash, never returned to callers
    password_hash: Optional[str] = None


@dataclass
class Stats:
    event_count: int = 0
    person_count: int = 0


@dataclass
class DeleteResult:
    """Counts removed by one retention sweep"""

    event_count: int = 0
    person_count: int = 0
