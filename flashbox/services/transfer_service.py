# flashbox/services/transfer_service.py
import json
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import ValidationError

from flashbox.config import IMPORT_HISTORY_LIMIT
from flashbox.core.locale_manager import T
from flashbox.core.log_manager import logger
from flashbox.schemas import TransferDocument
from flashbox.services.card_store import CardStore, sanitize_html
from flashbox.services.leitner_service import initialize_card

EXPORT_VERSION = '1.0'


class InvalidImportError(ValueError):
    """Raised for unreadable or incomplete import documents. Nothing is changed."""
    pass


class ImportPolicy(str, Enum):
    MERGE = "merge"      # keep existing data, add what is new
    REPLACE = "replace"  # overwrite everything


# --- EXPORT ---

def export_document(store: CardStore, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now(timezone.utc)
    document = TransferDocument(
        version=EXPORT_VERSION,
        export_date=now,
        flashcards=store.cards,
        categories=store.categories,
        sessions=store.sessions
    )
    return document.model_dump(mode='json', by_alias=True)


def export_json(store: CardStore, now: Optional[datetime] = None) -> str:
    return json.dumps(export_document(store, now), indent=2, ensure_ascii=False)


def export_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"flashcards_backup_{now.strftime('%Y-%m-%d')}.json"


# --- IMPORT ---

def parse_import(file_content: str, now: Optional[datetime] = None) -> TransferDocument:
    """
    1. Parses JSON.
    2. Validates the document (version, flashcards and categories are required).
    3. Sanitizes card texts and initializes Leitner data.
    Returns the ready-to-apply document.
    """
    try:
        data = json.loads(file_content)
    except json.JSONDecodeError:
        raise InvalidImportError(T("import_invalid_format"))

    if not isinstance(data, dict):
        raise InvalidImportError(T("import_invalid_format"))

    try:
        document = TransferDocument.model_validate(data)
    except ValidationError as e:
        raise InvalidImportError(f"{T('import_invalid_format')} {e}")

    for card in document.flashcards:
        card.question = sanitize_html(card.question)
        card.answer = sanitize_html(card.answer)
        initialize_card(card, now)

    return document


def apply_import(store: CardStore, document: TransferDocument, policy: ImportPolicy) -> int:
    """
    Writes a parsed document into the store.
    The new state is assembled first and swapped in with a single call.
    Returns the number of cards added (MERGE) or now held (REPLACE).
    """
    # Cards might come straight from a caller-built document
    for card in document.flashcards:
        initialize_card(card)

    imported_sessions = document.sessions or []

    if policy is ImportPolicy.REPLACE:
        store.replace_contents(document.flashcards, document.categories, imported_sessions)
        logger.info(f"Import replaced store: {len(document.flashcards)} cards, {len(document.categories)} categories.")
        return len(document.flashcards)

    # Stored cards may predate sanitizing; compare on the normalized text
    known_questions = {sanitize_html(card.question) for card in store.cards}
    known_ids = {card.id for card in store.cards}
    new_cards = []
    for card in document.flashcards:
        question = sanitize_html(card.question)
        if question in known_questions:
            continue
        if card.id in known_ids:
            card = card.model_copy(update={'id': uuid4().hex})
        known_questions.add(question)
        known_ids.add(card.id)
        new_cards.append(card)

    categories = list(store.categories)
    categories.extend(c for c in _unique(document.categories) if c not in categories)

    sessions = (list(store.sessions) + list(imported_sessions))[:IMPORT_HISTORY_LIMIT]

    store.replace_contents(store.cards + new_cards, categories, sessions)
    logger.info(f"Import merged: {len(new_cards)} new cards, {len(categories)} categories.")
    return len(new_cards)


def import_text(store: CardStore, file_content: str, policy: ImportPolicy) -> int:
    """Parse and apply in one go; raises InvalidImportError before touching the store."""
    return apply_import(store, parse_import(file_content), policy)


def import_message(count: int, policy: ImportPolicy, locale: Optional[str] = None) -> str:
    """Confirmation text for a finished import."""
    if policy is ImportPolicy.REPLACE:
        return T("import_replaced", locale=locale)
    return T("import_merged", locale=locale, count=count)


def _unique(values: List[str]) -> List[str]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen
