# flashbox/services/leitner_service.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from flashbox.models import LeitnerLevel, MIN_LEVEL, MAX_LEVEL
from flashbox.schemas import Card

# --- CONSTANTS ---
# Review interval in days per box
LEITNER_INTERVALS = {
    LeitnerLevel.NEW: 1,
    LeitnerLevel.LEARNING: 3,
    LeitnerLevel.FAMILIAR: 7,
    LeitnerLevel.KNOWN: 14,
    LeitnerLevel.MASTERED: 30,
}
DEFAULT_INTERVAL_DAYS = 1


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def interval(level: int) -> timedelta:
    """Time until the next review for a card sitting at `level`."""
    return timedelta(days=LEITNER_INTERVALS.get(level, DEFAULT_INTERVAL_DAYS))


def initialize_card(card: Card, now: Optional[datetime] = None) -> Card:
    """
    Fills in missing Leitner data so the card is immediately due.
    Already initialized cards are left untouched.
    """
    if not card.level:
        card.level = MIN_LEVEL
    if card.next_review is None:
        card.next_review = _now(now)
    return card


def needs_initialization(card: Card) -> bool:
    return not card.level or card.next_review is None


def is_due(card: Card, now: Optional[datetime] = None) -> bool:
    if card.next_review is None:
        return True
    return card.next_review <= _now(now)


def record_correct(card: Card, now: Optional[datetime] = None) -> Card:
    """Promotes the card one box (saturating at the top box) and reschedules it."""
    now = _now(now)
    card.level = min(MAX_LEVEL, (card.level or MIN_LEVEL) + 1)
    card.last_reviewed = now
    card.next_review = now + interval(card.level)
    return card


def record_incorrect(card: Card, now: Optional[datetime] = None) -> Card:
    """Sends the card all the way back to the first box, whatever its level."""
    now = _now(now)
    card.level = MIN_LEVEL
    card.last_reviewed = now
    card.next_review = now + interval(MIN_LEVEL)
    return card
