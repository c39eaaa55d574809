# flashbox/services/stats_service.py
from datetime import datetime
from typing import Dict, List, Optional

from flashbox.core.locale_manager import T
from flashbox.models import MAX_LEVEL, MIN_LEVEL
from flashbox.services.card_store import CardStore


def get_level_stats(store: CardStore) -> List[Dict]:
    """
    Card count per Leitner box, across all categories.
    Returns one dict per level (1..5) with count and share of all cards.
    """
    counts = {level: 0 for level in range(MIN_LEVEL, MAX_LEVEL + 1)}
    for card in store.cards:
        level = card.level or MIN_LEVEL
        counts[level] = counts.get(level, 0) + 1

    total = len(store.cards)
    return [
        {
            "level": level,
            "count": count,
            "percentage": (count / total) * 100 if total > 0 else 0.0
        }
        for level, count in counts.items()
    ]


def get_category_stats(store: CardStore) -> Dict[str, Dict]:
    """Per category: card count, average level and progress towards level 5."""
    category_stats = {}
    for category in store.categories:
        category_cards = store.cards_in_category(category)
        total = len(category_cards)
        level_sum = sum(card.level or MIN_LEVEL for card in category_cards)
        avg_level = level_sum / total if total > 0 else 0.0

        category_stats[category] = {
            "total": total,
            "avg_level": round(avg_level, 1),
            "progress": round((avg_level / MAX_LEVEL) * 100) if total > 0 else 0
        }
    return category_stats


def get_due_counts(store: CardStore, now: Optional[datetime] = None) -> Dict[str, int]:
    return {category: len(store.due_cards(category, now)) for category in store.categories}


def get_session_history(store: CardStore) -> List[Dict]:
    """Helper to format the session history into UI-friendly dicts, newest first."""
    data = []
    for session in store.sessions:
        data.append({
            "date": session.date.strftime("%Y-%m-%d %H:%M"),
            "category": session.category,
            "total": session.total,
            "correct": session.correct,
            "incorrect": session.incorrect,
            "success_rate": session.success_rate
        })
    return data


def history_lines(store: CardStore, locale: Optional[str] = None) -> List[str]:
    """One display line per recorded session, or a single placeholder line."""
    rows = get_session_history(store)
    if not rows:
        return [T("no_sessions", locale=locale)]

    return [
        f"{row['date']} - {row['category']}: " + T(
            "history_entry",
            locale=locale,
            total=row["total"],
            correct=row["correct"],
            incorrect=row["incorrect"],
            rate=row["success_rate"]
        )
        for row in rows
    ]
