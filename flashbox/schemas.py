# flashbox/schemas.py
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from flashbox.models import MIN_LEVEL, MAX_LEVEL


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Legacy exports may carry naive timestamps; those were always UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Card(BaseModel):
    """
    A single flashcard plus its Leitner scheduling data.
    Instances are owned by the CardStore and mutated in place.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    question: str
    answer: str
    category: str
    topic: Optional[str] = None

    level: Optional[int] = None
    last_reviewed: Optional[datetime] = None
    next_review: Optional[datetime] = None

    @field_validator('level', mode='before')
    def validate_level(cls, v):
        if not v:
            return None  # 0 / missing means "not yet initialized"
        if int(v) < MIN_LEVEL or int(v) > MAX_LEVEL:
            raise ValueError(f"Level must be between {MIN_LEVEL} and {MAX_LEVEL}.")
        return int(v)

    @field_validator('last_reviewed', 'next_review')
    def validate_timezone(cls, v):
        return _as_utc(v)


class SessionRecord(BaseModel):
    """One finished study session, as kept in the history. Immutable."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    date: datetime
    category: Optional[str] = None
    correct: int = 0
    incorrect: int = 0
    total: int = 0
    success_rate: int = 0

    @field_validator('date')
    def validate_timezone(cls, v):
        return _as_utc(v)

    @model_validator(mode='before')
    def fill_total(cls, data):
        if isinstance(data, dict) and not data.get('total'):
            data = {**data, 'total': (data.get('correct') or 0) + (data.get('incorrect') or 0)}
        return data


class TransferDocument(BaseModel):
    """Export/backup file: {version, exportDate, flashcards, categories, sessions}."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: str
    export_date: Optional[datetime] = None
    flashcards: List[Card]
    categories: List[str]
    sessions: Optional[List[SessionRecord]] = None

    @field_validator('version', mode='before')
    def validate_version(cls, v):
        if v is None or v == "":
            raise ValueError("Missing version.")
        return str(v)


class LevelOutcome(str, Enum):
    """How a level bucket got emptied by a level-filtered run."""
    PROMOTED = "promoted"  # every answer correct
    DEMOTED = "demoted"    # every answer wrong
    MIXED = "mixed"


class SessionSummary(BaseModel):
    """Emitted by the session runner when a run completes."""
    category: Optional[str] = None
    level_filter: Optional[int] = None

    correct_count: int
    incorrect_count: int
    success_rate: int

    # Only populated for level-filtered runs, recomputed from the live store
    remaining_at_level: Optional[int] = None
    level_cleared: bool = False
    level_outcome: Optional[LevelOutcome] = None
