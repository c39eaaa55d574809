# flashbox/database.py
from sqlmodel import SQLModel, create_engine, Session
from flashbox.config import DB_FILE, DATABASE_URL
from flashbox.core.log_manager import logger
import os

# check_same_thread=False lets the engine be shared with a UI event loop thread
engine = create_engine(DATABASE_URL, echo=False, connect_args={"check_same_thread": False})

def init_db(target_engine=None):
    """
    Creates the storage table based on the models.
    Should be called on app startup.
    """
    from flashbox.models import StorageEntry # Import to register models
    target_engine = target_engine or engine

    if target_engine is engine:
        db_dir = os.path.dirname(DB_FILE)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    SQLModel.metadata.create_all(target_engine)
    logger.info(f"Database initialized at {target_engine.url}")

def create_session(target_engine=None):
    """Direct session factory. Use as `with create_session() as session:`"""
    return Session(target_engine or engine)
