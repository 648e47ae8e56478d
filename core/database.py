"""
core/database.py -- Engine construction for the shared relational store.

One SQLAlchemy Engine per process. It is built explicitly in the API lifespan
(or by the CLI), handed to every store, and disposed on shutdown. Nothing here
caches a module-level connection.

Backends:
  SQLite   -- local development. check_same_thread=False because FastAPI runs
              sync handlers in a thread pool; WAL + foreign keys per connection.
  Postgres -- production (Neon or any hosted Postgres). pool_pre_ping so a
              serverless database that dropped idle connections does not
              surface as a failed request.

Swapping backends is a connection string change, not a rewrite -- all SQL in
the stores goes through SQLAlchemy Core with bound parameters.
"""

import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine

logger = logging.getLogger("fintrack.db")


def _sqlite_on_connect(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign keys for each new SQLite connection.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_url: str) -> Engine:
    """Build the Engine for db_url and register backend-specific hooks."""
    if db_url.startswith("sqlite"):
        engine = create_engine(db_url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _sqlite_on_connect)
        logger.info("Using SQLite database connection")
    else:
        engine = create_engine(db_url, pool_pre_ping=True)
        logger.info("Using %s database connection", engine.dialect.name)
    return engine


def ping(engine: Engine) -> bool:
    """Return True if a trivial query succeeds. Used by the health endpoint."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database ping failed")
        return False
