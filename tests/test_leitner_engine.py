"""
Tests for the Leitner engine.

Tests cover:
- Interval table and fallback
- Initialization of new and legacy cards
- Promotion / demotion rules
- Due-ness
"""

import random
from datetime import timedelta

import pytest

from flashbox.schemas import Card
from flashbox.services.leitner_service import (
    LEITNER_INTERVALS,
    initialize_card,
    interval,
    is_due,
    needs_initialization,
    record_correct,
    record_incorrect,
)


def _card(**kwargs):
    return Card(question="2 + 2", answer="4", category="Mathe", **kwargs)


class TestIntervals:

    @pytest.mark.parametrize("level,days", [(1, 1), (2, 3), (3, 7), (4, 14), (5, 30)])
    def test_interval_table(self, level, days):
        assert interval(level) == timedelta(days=days)

    def test_intervals_non_decreasing(self):
        values = [interval(level) for level in range(1, 6)]
        assert values == sorted(values)

    def test_unmapped_level_falls_back_to_one_day(self):
        assert interval(0) == timedelta(days=1)
        assert interval(9) == timedelta(days=1)

    def test_table_covers_all_levels(self):
        assert sorted(int(level) for level in LEITNER_INTERVALS) == [1, 2, 3, 4, 5]


class TestInitialize:

    def test_new_card_is_due_immediately(self, now):
        card = initialize_card(_card(), now)

        assert card.level == 1
        assert card.last_reviewed is None
        assert card.next_review == now
        assert is_due(card, now)

    def test_initialize_is_idempotent(self, now):
        later = now + timedelta(days=7)
        card = _card(level=3, last_reviewed=now, next_review=later)

        initialize_card(card, now + timedelta(days=1))

        assert card.level == 3
        assert card.last_reviewed == now
        assert card.next_review == later

    def test_zero_level_counts_as_missing(self, now):
        card = _card(level=0)
        assert needs_initialization(card)
        assert initialize_card(card, now).level == 1


class TestAnswers:

    @pytest.mark.parametrize("start_level", [1, 2, 3, 4, 5])
    def test_incorrect_always_resets_to_level_one(self, now, start_level):
        card = _card(level=start_level, next_review=now)

        record_incorrect(card, now)

        assert card.level == 1
        assert card.last_reviewed == now
        assert card.next_review == now + timedelta(days=1)

    def test_correct_promotes_one_level(self, now):
        card = _card(level=2, next_review=now)

        record_correct(card, now)

        assert card.level == 3
        assert card.last_reviewed == now
        assert card.next_review == now + timedelta(days=7)

    def test_correct_saturates_at_level_five(self, now):
        card = _card(level=5, next_review=now)

        record_correct(card, now)

        assert card.level == 5
        assert card.next_review == now + timedelta(days=30)

    def test_level_stays_in_range_for_any_sequence(self, now):
        rng = random.Random(7)
        card = initialize_card(_card(), now)

        for step in range(300):
            moment = now + timedelta(hours=step)
            if rng.random() < 0.7:
                record_correct(card, moment)
            else:
                record_incorrect(card, moment)
            assert 1 <= card.level <= 5


class TestIsDue:

    def test_missing_next_review_is_due(self, now):
        assert is_due(_card(), now)

    def test_future_review_is_not_due(self, now):
        card = _card(level=2, next_review=now + timedelta(seconds=1))
        assert not is_due(card, now)

    def test_review_at_now_is_due(self, now):
        card = _card(level=2, next_review=now)
        assert is_due(card, now)

    def test_answered_card_is_not_due_until_interval_passes(self, now):
        card = record_correct(initialize_card(_card(), now), now)

        assert not is_due(card, now + timedelta(days=2))
        assert is_due(card, now + timedelta(days=3))
