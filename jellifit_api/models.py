"""
SQL storage models
"""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .database import Base
from .entities import ID_MAX_LENGTH, TEXT_MAX_LENGTH


class EventRecord(Base):
    """A scheduling event and its candidate times"""

    __tablename__ = "events"

    id = Column(String(ID_MAX_LENGTH), primary_key=True)
    name = Column(String(TEXT_MAX_LENGTH), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    # Advanced on every read, drives retention
    visited_at = Column(DateTime(timezone=True), nullable=False, index=True)
    times = Column(JSON, nullable=False, default=list)
    timezone = Column(String(TEXT_MAX_LENGTH), nullable=False)

    people = relationship(
        "PersonRecord", back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )


class PersonRecord(Base):
    """An attendee's availability within one event"""

    __tablename__ = "people"

    event_id = Column(
        String(ID_MAX_LENGTH), ForeignKey("events.id", ondelete="CASCADE"), primary_key=True
    )
    name = Column(String(TEXT_MAX_LENGTH), primary_key=True)
    password_hash = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    availability = Column(JSON, nullable=False, default=list)

    event = relationship("EventRecord", back_populates="people")


class StatsRecord(Base):
    """Single-row table of global counters"""

    __tablename__ = "stats"

    id = Column(Integer, primary_key=True)
    event_count = Column(Integer, nullable=False, default=0)
    person_count = Column(Integer, nullable=False, default=0)
