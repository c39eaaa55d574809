# main.py
from flashbox.core.locale_manager import T
from flashbox.core.log_manager import logger
from flashbox.database import init_db
from flashbox.services.card_store import CardStore
from flashbox.services.stats_service import get_due_counts, get_level_stats
from flashbox.services.storage_service import SqlStorage


def bootstrap(engine=None) -> CardStore:
    """
    Creates the storage table (if needed) and returns a hydrated card store.
    UI front ends call this once at startup and hand the store to a SessionRunner.
    """
    init_db(engine)
    return CardStore(SqlStorage(engine)).hydrate()


def log_overview(store: CardStore):
    for row in get_level_stats(store):
        logger.info(f"{T('level_label', level=row['level'])}: {row['count']} cards ({row['percentage']:.0f}%)")
    for category, due in get_due_counts(store).items():
        logger.info(f"{category}: {due} cards due")


# --- STARTUP ---
if __name__ == "__main__":
    log_overview(bootstrap())
