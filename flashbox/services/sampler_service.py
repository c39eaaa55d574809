# flashbox/services/sampler_service.py
import random
from typing import List, Optional, Sequence

from flashbox.core.locale_manager import T
from flashbox.core.log_manager import logger
from flashbox.models import MAX_LEVEL, MIN_LEVEL
from flashbox.schemas import Card


class EmptyDeckError(ValueError):
    """Raised when a session would start without any cards."""
    pass


def card_weight(card: Card) -> int:
    """Level 1 -> 5 copies ... level 5 -> 1 copy."""
    return (MAX_LEVEL + 1) - (card.level or MIN_LEVEL)


def build_weighted_deck(cards: Sequence[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Mixed mode: every card of the category, repeated by weight and shuffled.
    The entries are the store's own Card objects, not copies.
    Due dates are not considered here.
    """
    deck: List[Card] = []
    for card in cards:
        deck.extend([card] * card_weight(card))

    (rng or random).shuffle(deck)
    logger.info(f"Built weighted deck: {len(deck)} entries from {len(cards)} cards.")
    return deck


def build_level_deck(
    cards: Sequence[Card],
    level: int,
    rng: Optional[random.Random] = None
) -> List[Card]:
    """
    Level mode: only the cards sitting at `level`, each once, shuffled.
    Raises EmptyDeckError when the box is empty.
    """
    deck = [card for card in cards if card.level == level]

    if not deck:
        raise EmptyDeckError(T("no_cards_at_level", level=level))

    (rng or random).shuffle(deck)
    logger.info(f"Built level deck: {len(deck)} cards at level {level}.")
    return deck
