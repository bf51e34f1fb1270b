from core.db.base import MAX_INTEGER, Base, fits_integer
from core.db.mixins import TimestampMixin
from core.db.session import async_session_factory, engine, get_db
from core.db.transaction import run_in_transaction

__all__ = [
    "MAX_INTEGER",
    "Base",
    "TimestampMixin",
    "async_session_factory",
    "engine",
    "fits_integer",
    "get_db",
    "run_in_transaction",
]
