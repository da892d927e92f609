from slotbook.db.base import Base
from slotbook.db.session import get_db, engine, SessionLocal
from slotbook.db.tables import ALL_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES"]
