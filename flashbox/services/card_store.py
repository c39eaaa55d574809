# flashbox/services/card_store.py
import html
import json
from datetime import datetime
from typing import Iterable, List, Optional

import bleach
from pydantic import ValidationError

from flashbox.config import DEFAULT_CATEGORIES, SESSION_HISTORY_LIMIT
from flashbox.core.log_manager import logger
from flashbox.schemas import Card, SessionRecord
from flashbox.services.leitner_service import initialize_card, is_due, needs_initialization
from flashbox.services.storage_service import (
    CARDS_KEY,
    CATEGORIES_KEY,
    SESSIONS_KEY,
    StorageBackend,
)

ALLOWED_TAGS = ['b', 'i', 'strong', 'em', 'p', 'br', 'ul', 'ol', 'li', 'code', 'pre', 'sub', 'sup', 'span']


def sanitize_html(content: str) -> str:
    """Strips disallowed tags; plain text keeps its literal '&', '<' and '>'."""
    if not content: return ""
    return html.unescape(bleach.clean(content, tags=ALLOWED_TAGS, strip=True)).strip()


class CardNotFoundError(KeyError):
    """Raised when a card id is not in the store."""
    pass


class CardStore:
    """
    Owns every Card, the category list and the session history.
    Decks built from the store hold these same Card objects, so answering
    a card in a session updates the store directly.
    Every mutation is followed by a write to the storage backend.
    """

    def __init__(
        self,
        storage: StorageBackend,
        default_categories: Optional[List[str]] = None,
        history_limit: int = SESSION_HISTORY_LIMIT
    ):
        self.storage = storage
        self.default_categories = list(DEFAULT_CATEGORIES if default_categories is None else default_categories)
        self.history_limit = history_limit

        self.cards: List[Card] = []
        self.categories: List[str] = list(self.default_categories)
        self.sessions: List[SessionRecord] = []

    # --- HYDRATION ---

    def _load_list(self, key: str) -> Optional[list]:
        blob = self.storage.load(key)
        if blob is None:
            return None
        try:
            data = json.loads(blob)
        except json.JSONDecodeError:
            logger.error(f"Stored '{key}' is not valid JSON; ignoring it.")
            return None
        if not isinstance(data, list):
            logger.error(f"Stored '{key}' is not a list; ignoring it.")
            return None
        return data

    def hydrate(self, now: Optional[datetime] = None) -> "CardStore":
        """
        Loads cards, categories and sessions from storage.
        Cards saved before they had Leitner data are initialized and written back.
        """
        raw_cards = self._load_list(CARDS_KEY) or []
        raw_categories = self._load_list(CATEGORIES_KEY)
        raw_sessions = self._load_list(SESSIONS_KEY) or []

        self.cards = []
        for index, raw_card in enumerate(raw_cards):
            try:
                self.cards.append(Card.model_validate(raw_card))
            except ValidationError as e:
                logger.error(f"Skipping unreadable stored card #{index}: {e}")

        self.categories = [str(c) for c in raw_categories] if raw_categories is not None else list(self.default_categories)
        self.sessions = [SessionRecord.model_validate(s) for s in raw_sessions]

        migrated = 0
        for card in self.cards:
            if needs_initialization(card):
                initialize_card(card, now)
                migrated += 1

        # Ids generated on load must be written back to stay stable
        missing_ids = sum(1 for c in raw_cards if isinstance(c, dict) and not c.get('id'))

        if migrated or missing_ids:
            self.save_cards()
            logger.info(f"Migrated {migrated} cards to the Leitner system.")

        logger.info(f"Card store loaded: {len(self.cards)} cards, {len(self.categories)} categories, {len(self.sessions)} sessions.")
        return self

    # --- PERSISTENCE ---

    def save_cards(self):
        payload = [c.model_dump(mode='json', by_alias=True) for c in self.cards]
        self.storage.save(CARDS_KEY, json.dumps(payload))

    def save_categories(self):
        self.storage.save(CATEGORIES_KEY, json.dumps(self.categories))

    def save_sessions(self):
        payload = [s.model_dump(mode='json', by_alias=True) for s in self.sessions]
        self.storage.save(SESSIONS_KEY, json.dumps(payload))

    def save_all(self):
        self.save_cards()
        self.save_categories()
        self.save_sessions()

    # --- CATEGORIES ---

    def add_category(self, name: str) -> bool:
        clean_name = (name or "").strip()
        if not clean_name or clean_name in self.categories:
            return False

        self.categories.append(clean_name)
        self.save_categories()
        return True

    def remove_category(self, name: str) -> bool:
        """Cards keep their category label; references are advisory only."""
        if name not in self.categories:
            return False

        self.categories = [c for c in self.categories if c != name]
        self.save_categories()
        return True

    # --- CARDS ---

    def get_card(self, card_id: str) -> Card:
        for card in self.cards:
            if card.id == card_id:
                return card
        raise CardNotFoundError(card_id)

    def add_card(
        self,
        question: str,
        answer: str,
        category: str,
        topic: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Card:
        question = sanitize_html(question)
        answer = sanitize_html(answer)
        if not question or not answer or not category:
            raise ValueError("Question, answer and category are required.")

        card = initialize_card(Card(question=question, answer=answer, category=category, topic=topic), now)
        self.cards.append(card)
        self.save_cards()
        logger.info(f"Added card {card.id} to '{category}'.")
        return card

    def remove_card(self, card_id: str) -> Card:
        card = self.get_card(card_id)
        self.cards = [c for c in self.cards if c is not card]
        self.save_cards()
        return card

    def edit_card(self, card_id: str, question: str, answer: str) -> Card:
        """Only the texts change; the Leitner data is kept."""
        question = sanitize_html(question)
        answer = sanitize_html(answer)
        if not question or not answer:
            raise ValueError("Question and answer are required.")

        card = self.get_card(card_id)
        card.question = question
        card.answer = answer
        self.save_cards()
        return card

    def cards_in_category(self, category: str) -> List[Card]:
        return [c for c in self.cards if c.category == category]

    def count_at_level(self, category: str, level: int) -> int:
        return sum(1 for c in self.cards if c.category == category and c.level == level)

    def due_cards(self, category: Optional[str] = None, now: Optional[datetime] = None) -> List[Card]:
        pool = self.cards if category is None else self.cards_in_category(category)
        return [c for c in pool if is_due(c, now)]

    # --- SESSIONS ---

    def record_session(self, record: SessionRecord):
        """Newest first; the oldest entries fall off past the history limit."""
        self.sessions = [record] + self.sessions
        self.sessions = self.sessions[:self.history_limit]
        self.save_sessions()

    # --- BULK ---

    def replace_contents(
        self,
        cards: Iterable[Card],
        categories: Iterable[str],
        sessions: Iterable[SessionRecord]
    ):
        """Swaps in a fully prepared state at once and persists it."""
        self.cards = list(cards)
        self.categories = list(categories)
        self.sessions = list(sessions)
        self.save_all()
