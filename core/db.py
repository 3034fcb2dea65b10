"""
core/db.py -- Engine construction and error translation shared by the stores.

Both stores (auth/store.py, company/store.py) use SQLAlchemy Core against the
same database URL. SQLite is the default; any SQLAlchemy URL works.
"""

import functools
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.errors import StoreUnavailable

logger = logging.getLogger("jobhunter.store")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block behind a writer.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Create an engine, adding the SQLite-specific settings when needed.

    check_same_thread=False lets FastAPI's threadpool share pooled SQLite
    connections.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def translate_store_errors(method):
    """Re-raise driver failures as StoreUnavailable. IntegrityError passes through."""

    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            logger.error("Store operation %s failed: %s", method.__name__, exc.__class__.__name__)
            raise StoreUnavailable() from exc

    return wrapper
