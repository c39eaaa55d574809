import json
from datetime import timedelta

import pytest
from pydantic import ValidationError

from flashbox.schemas import SessionRecord
from flashbox.services.card_store import CardNotFoundError, CardStore
from flashbox.services.storage_service import MemoryStorage, SqlStorage


class TestHydrate:

    def test_empty_storage_uses_default_categories(self, store):
        store.hydrate()

        assert store.cards == []
        assert store.categories == ['Mathe', 'Deutsch', 'Englisch']
        assert store.sessions == []

    def test_legacy_cards_are_migrated(self, now):
        storage = MemoryStorage({
            'flashcards': json.dumps([
                {"question": "Hauptstadt von Frankreich?", "answer": "Paris", "category": "Deutsch"}
            ]),
            'categories': json.dumps(["Deutsch"]),
        })

        store = CardStore(storage).hydrate(now)

        card = store.cards[0]
        assert card.level == 1
        assert card.next_review == now
        assert card.id

        saved = json.loads(storage.entries['flashcards'])
        assert saved[0]['id'] == card.id
        assert saved[0]['nextReview'].startswith("2026-10-17T12:00:00")

    def test_corrupt_blob_is_ignored(self):
        storage = MemoryStorage({'flashcards': "{not json", 'categories': json.dumps({"a": 1})})

        store = CardStore(storage, default_categories=['Mathe']).hydrate()

        assert store.cards == []
        assert store.categories == ['Mathe']

    def test_unreadable_card_is_skipped(self, now):
        storage = MemoryStorage({
            'flashcards': json.dumps([
                {"id": "good", "question": "ok", "answer": "a", "category": "Mathe",
                 "level": 2, "nextReview": "2026-10-17T12:00:00Z"},
                {"id": "bad", "question": "bad", "answer": "a", "category": "Mathe", "level": 7},
                {"id": "incomplete", "question": "no answer"},
            ]),
        })

        store = CardStore(storage).hydrate(now)

        assert [c.id for c in store.cards] == ["good"]
        assert store.cards[0].level == 2

    def test_plain_text_survives_round_trip(self, engine, now):
        first = CardStore(SqlStorage(engine), default_categories=['Mathe'])
        card = first.add_card("Is 2 < 3 & 4 > 1?", "Yes & no", "Mathe", now=now)

        assert card.question == "Is 2 < 3 & 4 > 1?"
        assert card.answer == "Yes & no"

        second = CardStore(SqlStorage(engine)).hydrate()

        assert second.cards[0].question == "Is 2 < 3 & 4 > 1?"

    def test_sql_storage_round_trip(self, engine, now):
        first = CardStore(SqlStorage(engine), default_categories=['Mathe'])
        first.hydrate()
        card = first.add_card("1 + 1", "2", "Mathe", now=now)
        first.add_category("Physik")

        second = CardStore(SqlStorage(engine)).hydrate()

        assert [c.id for c in second.cards] == [card.id]
        assert second.cards[0].next_review == now
        assert second.categories == ['Mathe', 'Physik']

    def test_sql_storage_overwrites_key(self, engine):
        storage = SqlStorage(engine)
        storage.save('categories', '["a"]')
        storage.save('categories', '["b"]')

        assert storage.load('categories') == '["b"]'
        assert storage.load('missing') is None


class TestCategories:

    def test_add_category(self, store):
        assert store.add_category("  Physik ")
        assert store.categories[-1] == "Physik"

    def test_duplicate_and_blank_are_rejected(self, store):
        assert not store.add_category("Mathe")
        assert not store.add_category("   ")

    def test_remove_category_keeps_cards(self, store, card_factory):
        card = card_factory("a", category='Deutsch')

        assert store.remove_category('Deutsch')

        assert 'Deutsch' not in store.categories
        assert store.get_card(card.id).category == 'Deutsch'

    def test_remove_unknown_category(self, store):
        assert not store.remove_category('Chemie')


class TestCards:

    def test_add_card_is_initialized(self, store, now):
        card = store.add_card("3 * 3", "9", "Mathe", topic="Multiplication", now=now)

        assert card.level == 1
        assert card.next_review == now
        assert card.topic == "Multiplication"
        assert store.cards == [card]

    def test_add_card_sanitizes_markup(self, store):
        card = store.add_card("<b>Bold</b> <img src=x>question", "answer", "Mathe")

        assert card.question == "<b>Bold</b> question"

    def test_add_card_requires_fields(self, store):
        with pytest.raises(ValueError):
            store.add_card("question", "", "Mathe")

    def test_edit_card_keeps_schedule(self, store, card_factory, now):
        card = card_factory("old", level=4)

        store.edit_card(card.id, "new question", "new answer")

        assert card.question == "new question"
        assert card.answer == "new answer"
        assert card.level == 4

    def test_remove_card(self, store, card_factory):
        keep = card_factory("keep")
        drop = card_factory("drop")

        store.remove_card(drop.id)

        assert store.cards == [keep]

    def test_unknown_card_raises(self, store):
        with pytest.raises(CardNotFoundError):
            store.remove_card("nope")

    def test_same_text_cards_stay_distinct(self, store, now):
        first = store.add_card("Same?", "Yes", "Mathe", now=now)
        second = store.add_card("Same?", "Yes", "Mathe", now=now)

        assert first.id != second.id
        assert store.get_card(second.id) is second

    def test_count_at_level(self, store, card_factory):
        card_factory("a", level=2)
        card_factory("b", level=2)
        card_factory("c", level=2, category='Deutsch')
        card_factory("d", level=3)

        assert store.count_at_level('Mathe', 2) == 2

    def test_due_cards(self, store, card_factory, now):
        due = card_factory("due")
        later = card_factory("later")
        later.next_review = now + timedelta(days=3)

        assert store.due_cards('Mathe', now) == [due]
        assert store.due_cards(now=now + timedelta(days=3)) == [due, later]


class TestSessionHistory:

    def test_history_is_capped_newest_first(self, storage, now):
        store = CardStore(storage, history_limit=3)

        for i in range(5):
            store.record_session(SessionRecord(date=now + timedelta(minutes=i), category='Mathe', correct=i, incorrect=1))

        assert len(store.sessions) == 3
        assert [s.correct for s in store.sessions] == [4, 3, 2]
        assert len(json.loads(storage.entries['sessions'])) == 3

    def test_records_are_immutable(self, now):
        record = SessionRecord(date=now, correct=1, incorrect=1)

        assert record.total == 2
        with pytest.raises(ValidationError):
            record.correct = 5
