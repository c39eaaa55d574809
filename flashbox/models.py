from datetime import datetime, timezone
from enum import IntEnum
from sqlmodel import SQLModel, Field

class LeitnerLevel(IntEnum):
    """
    The five boxes of the Leitner system.
    Cards start in NEW and climb one box per correct answer.
    """
    NEW = 1
    LEARNING = 2
    FAMILIAR = 3
    KNOWN = 4
    MASTERED = 5

MIN_LEVEL = LeitnerLevel.NEW.value
MAX_LEVEL = LeitnerLevel.MASTERED.value

# --- DURABLE STORAGE (The Save File) ---

class StorageEntry(SQLModel, table=True):
    """
    One JSON blob per storage key ('flashcards', 'categories', 'sessions').
    The card store only ever reads and writes whole blobs.
    """
    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
