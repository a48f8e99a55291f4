"""
core/db.py -- SQLAlchemy engine construction for the embedded database.

Both repositories (books/store.py and auth/store.py) share one engine and one
MetaData so the books and users tables live in the same SQLite file. The
engine is built once in the API lifespan and handed to each store -- stores
never open their own connections to a hard-coded path.

Usage:
    engine = create_db_engine("sqlite:///mydb.sqlite")
    books = BookStore(engine)
    users = UserStore(engine)
    engine.dispose()
"""

from sqlalchemy import MetaData, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

metadata = MetaData()


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    WAL (Write-Ahead Logging) allows readers to proceed without blocking
    during writes; SQLite still serializes the writers. Set per-connection
    because SQLite PRAGMAs are not inherited by new connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_db_engine(db_url: str) -> Engine:
    """Build an Engine for db_url, applying the SQLite-specific connection setup."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        # FastAPI runs sync handlers in a thread pool, so a pooled SQLite
        # connection may be used from a thread other than the one that opened it.
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def ping(engine: Engine) -> bool:
    """Return True if a trivial statement succeeds against the engine."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return False
    return True
