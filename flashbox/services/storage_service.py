# flashbox/services/storage_service.py
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from flashbox.core.log_manager import logger
from flashbox.database import create_session, engine as default_engine
from flashbox.models import StorageEntry

# --- CONSTANTS ---
CARDS_KEY = 'flashcards'
CATEGORIES_KEY = 'categories'
SESSIONS_KEY = 'sessions'


class StorageBackend(Protocol):
    """Key -> JSON blob contract the card store persists through."""

    def load(self, key: str) -> Optional[str]: ...

    def save(self, key: str, blob: str) -> None: ...


class SqlStorage:
    """
    Default backend: one StorageEntry row per key.
    Writes are best-effort. A failed write is logged and the in-memory
    store stays the system of record for the running process.
    """

    def __init__(self, engine=None):
        self.engine = engine or default_engine

    def load(self, key: str) -> Optional[str]:
        with create_session(self.engine) as session:
            entry = session.get(StorageEntry, key)
            return entry.value if entry else None

    def save(self, key: str, blob: str) -> None:
        try:
            with create_session(self.engine) as session:
                entry = session.get(StorageEntry, key)
                if entry:
                    entry.value = blob
                    entry.updated_at = datetime.now(timezone.utc)
                else:
                    entry = StorageEntry(key=key, value=blob)
                session.add(entry)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to persist '{key}': {e}")


class MemoryStorage:
    """Process-local backend, nothing survives a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.entries: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def save(self, key: str, blob: str) -> None:
        self.entries[key] = blob
