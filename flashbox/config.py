from typing import List
import dotenv
import os
dotenv.load_dotenv("flashbox.env")

DB_FILE = os.getenv("FLASHBOX_DB_FILE", "db/flashbox.db")
DATABASE_URL = f"sqlite:///{DB_FILE}"

LOG_LEVEL = os.getenv("FLASHBOX_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("FLASHBOX_LOG_FILE")  # Optional, console only when unset

LOCALE = os.getenv("FLASHBOX_LOCALE", "en")

_default_categories_str = os.getenv("FLASHBOX_DEFAULT_CATEGORIES", "Mathe,Deutsch,Englisch")
DEFAULT_CATEGORIES: List[str] = [
    name.strip() for name in _default_categories_str.split(",") if name.strip()
]

# Recorded sessions are capped tighter than imported ones
SESSION_HISTORY_LIMIT = int(os.getenv("FLASHBOX_SESSION_HISTORY_LIMIT", "10"))
IMPORT_HISTORY_LIMIT = int(os.getenv("FLASHBOX_IMPORT_HISTORY_LIMIT", "20"))
