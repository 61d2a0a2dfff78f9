"""
core/db.py -- Shared SQLAlchemy Core schema and engine factory.

All three tables live on one MetaData so the submissions foreign keys can
resolve users.id and tasks.id at create_all() time, and so the admin listing
can join across them. UserStore (auth/store.py) and MarketStore
(market/store.py) each build their own engine from the same URL through
create_db_engine(); pointing both at one database is what makes the joins
and the foreign keys work.

Uses SQLAlchemy Core (not ORM) so the dataclasses in auth/models.py and
market/models.py remain the authoritative domain representation. Swapping
SQLite for PostgreSQL is a connection string change.

Layer rule: core/ is the kernel. No imports from api/, auth/, or market/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Float, ForeignKey, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255)),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("role", String(20), nullable=False, server_default="worker"),
    Column("created_at", String(32), nullable=False),
)

tasks = Table(
    "tasks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("description", Text),
    Column("reward", Float, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
)

submissions = Table(
    "submissions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("task_id", Integer, ForeignKey("tasks.id"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("evidence", Text, nullable=False),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# SQLite connection pragmas
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Both are per-connection settings in SQLite -- new pooled connections do
    not inherit them. Without foreign_keys=ON, SQLite accepts a submission
    for a task that does not exist.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_db_engine(db_url: str) -> Engine:
    """Build an Engine for db_url and make sure the schema exists.

    create_all() is idempotent, so every store may call this on startup.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        # FastAPI runs sync handlers in a thread pool; pooled SQLite
        # connections may be handed to a different thread than created them.
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    metadata.create_all(engine)
    return engine
