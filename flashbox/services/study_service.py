# flashbox/services/study_service.py
import math
import random
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from flashbox.core.locale_manager import T
from flashbox.core.log_manager import logger
from flashbox.schemas import Card, LevelOutcome, SessionRecord, SessionSummary
from flashbox.services.card_store import CardStore
from flashbox.services.leitner_service import record_correct, record_incorrect
from flashbox.services.sampler_service import EmptyDeckError, build_level_deck, build_weighted_deck


class SessionStateError(RuntimeError):
    """Raised when a runner operation is called in the wrong state."""
    pass


class RunnerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


class AnswerResult(NamedTuple):
    card: Card
    correct: bool
    completed: bool


def success_rate(correct: int, incorrect: int) -> int:
    """Percentage of correct answers, rounded half up; 0 when nothing was answered."""
    total = correct + incorrect
    if total <= 0:
        return 0
    return math.floor(100 * correct / total + 0.5)


class SessionRunner:
    """
    Drives one study run over a deck: IDLE -> RUNNING -> COMPLETED.

    `answer` closes the input gate; the caller re-opens it with
    `resume_input` once its card transition has finished. Answers arriving
    while the gate is closed are dropped, so a double click counts once.
    """

    def __init__(
        self,
        store: CardStore,
        on_complete: Optional[Callable[[SessionSummary], None]] = None,
        rng: Optional[random.Random] = None
    ):
        self.store = store
        self.on_complete = on_complete
        self.rng = rng

        self.state = RunnerState.IDLE
        self.deck: List[Card] = []
        self.position = 0
        self.correct_count = 0
        self.incorrect_count = 0
        self.missed_cards: List[Card] = []
        self.category: Optional[str] = None
        self.level_filter: Optional[int] = None
        self.accepting_input = False
        self.summary: Optional[SessionSummary] = None

    # --- SESSION LIFECYCLE ---

    def start(
        self,
        deck: Sequence[Card],
        category: Optional[str] = None,
        level_filter: Optional[int] = None
    ) -> int:
        """
        Begins a run over `deck`. Returns the deck length.
        Raises EmptyDeckError (state unchanged) when the deck is empty.
        """
        if self.state is RunnerState.RUNNING:
            raise SessionStateError("A session is already running.")
        if not deck:
            raise EmptyDeckError(T("no_cards_in_category"))

        self._clear()
        self.deck = list(deck)
        self.category = category
        self.level_filter = level_filter
        self.state = RunnerState.RUNNING
        self.accepting_input = True

        logger.info(f"Session started: {len(self.deck)} cards, category={category}, level_filter={level_filter}")
        return len(self.deck)

    def start_weighted(self, category: str) -> int:
        """Mixed run over the whole category, lower levels drawn more often."""
        deck = build_weighted_deck(self.store.cards_in_category(category), rng=self.rng)
        return self.start(deck, category=category)

    def start_level(self, category: str, level: int) -> int:
        """Run over the cards of one level box of the category."""
        deck = build_level_deck(self.store.cards_in_category(category), level, rng=self.rng)
        return self.start(deck, category=category, level_filter=level)

    def reset(self):
        self._clear()
        self.state = RunnerState.IDLE
        logger.info("Session reset.")

    def _clear(self):
        self.deck = []
        self.position = 0
        self.correct_count = 0
        self.incorrect_count = 0
        self.missed_cards = []
        self.category = None
        self.level_filter = None
        self.accepting_input = False
        self.summary = None

    # --- GAMEPLAY ---

    def current_card(self) -> Card:
        if self.state is not RunnerState.RUNNING:
            raise SessionStateError(f"No current card while {self.state.value}.")
        return self.deck[self.position]

    def progress(self) -> Tuple[int, int]:
        """(cards answered in this pass, deck length)"""
        if self.state is RunnerState.COMPLETED:
            return len(self.deck), len(self.deck)
        return self.position, len(self.deck)

    def answer(self, is_correct: bool, now: Optional[datetime] = None) -> Optional[AnswerResult]:
        """
        Books the answer for the current card and advances.
        Returns None when the answer is dropped (gate closed or not running).
        """
        if self.state is not RunnerState.RUNNING or not self.accepting_input:
            logger.debug("Answer ignored: session is not accepting input.")
            return None

        self.accepting_input = False
        now = now or datetime.now(timezone.utc)
        card = self.deck[self.position]

        if is_correct:
            self.correct_count += 1
            record_correct(card, now)
        else:
            self.incorrect_count += 1
            self.missed_cards.append(card)
            record_incorrect(card, now)

        self.store.save_cards()

        self.position = (self.position + 1) % len(self.deck)
        if self.position == 0:
            self._complete(now)

        return AnswerResult(card=card, correct=is_correct, completed=self.state is RunnerState.COMPLETED)

    def resume_input(self):
        """Called by the UI once the transition to the next card is done."""
        if self.state is RunnerState.RUNNING:
            self.accepting_input = True

    # --- COMPLETION ---

    def _complete(self, now: datetime):
        self.state = RunnerState.COMPLETED
        self.accepting_input = False
        self.summary = self._build_summary()

        total = self.correct_count + self.incorrect_count
        if total > 0:
            self.store.record_session(SessionRecord(
                date=now,
                category=self.category,
                correct=self.correct_count,
                incorrect=self.incorrect_count,
                total=total,
                success_rate=self.summary.success_rate
            ))

        logger.info(
            f"Session completed: {self.correct_count} correct, {self.incorrect_count} wrong, "
            f"{self.summary.success_rate}% success."
        )

        if self.on_complete:
            self.on_complete(self.summary)

    def _build_summary(self) -> SessionSummary:
        summary = SessionSummary(
            category=self.category,
            level_filter=self.level_filter,
            correct_count=self.correct_count,
            incorrect_count=self.incorrect_count,
            success_rate=success_rate(self.correct_count, self.incorrect_count)
        )

        if self.level_filter is None:
            return summary

        # Count from the live store; the deck still lists the cards that just left the box
        remaining = self.store.count_at_level(self.category, self.level_filter)
        summary.remaining_at_level = remaining
        summary.level_cleared = remaining == 0

        if summary.level_cleared:
            if self.incorrect_count == 0:
                summary.level_outcome = LevelOutcome.PROMOTED
            elif self.correct_count == 0:
                summary.level_outcome = LevelOutcome.DEMOTED
            else:
                summary.level_outcome = LevelOutcome.MIXED

        return summary


def summary_message(summary: SessionSummary, locale: Optional[str] = None) -> str:
    """Human readable result text, with the level-specific line for level runs."""
    lines = [
        T("session_result", locale=locale, correct=summary.correct_count, incorrect=summary.incorrect_count),
        T("success_rate", locale=locale, rate=summary.success_rate),
    ]

    if summary.level_filter is not None:
        if summary.level_outcome is not None:
            lines.append(T(f"level_cleared_{summary.level_outcome.value}", locale=locale, level=summary.level_filter))
        else:
            lines.append(T("level_remaining", locale=locale, remaining=summary.remaining_at_level, level=summary.level_filter))

    return "\n".join(lines)
