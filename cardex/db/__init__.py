from cardex.db.database import async_session_factory, get_session, init_db, session_scope
from cardex.db.upsert import ensure_row, insert_if_missing, upsert

__all__ = [
    "async_session_factory",
    "ensure_row",
    "get_session",
    "init_db",
    "insert_if_missing",
    "session_scope",
    "upsert",
]
