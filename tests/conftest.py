import random
from datetime import datetime, timezone

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from flashbox.database import init_db
from flashbox.services.card_store import CardStore
from flashbox.services.storage_service import MemoryStorage

DEFAULT_CATEGORIES = ['Mathe', 'Deutsch', 'Englisch']


@pytest.fixture
def now():
    return datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return CardStore(storage, default_categories=DEFAULT_CATEGORIES)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def card_factory(store, now):
    """Adds a card to the store and puts it straight into the given level box."""
    def _make(question, level=1, category='Mathe'):
        card = store.add_card(question, f"answer to {question}", category, now=now)
        card.level = level
        return card
    return _make
