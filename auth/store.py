"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as market/store.py).
UserStore is the repository; _row_to_user is the mapper. Route and
dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  Email uniqueness is enforced by the UNIQUE constraint on users.email;
  create_user() lets IntegrityError propagate and register_user() in
  auth/tokens.py turns it into EmailAlreadyRegistered.

Layer rule: no imports from api/ or market/. Import from core/ is allowed.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.engine import Engine

from auth.models import User
from core.config import get_settings
from core.db import create_db_engine, now_iso
from core.db import users as _users


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///taskmarket.db")
        uid = store.create_user(User(name="Ana", email="ana@example.com", role="worker", hashed_password=h))
        user = store.get_by_email("ana@example.com")
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        self.engine: Engine = create_db_engine(db_url or get_settings().database_url)

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    name=user.name,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    role=user.role,
                    created_at=now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).first()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).first()
        return _row_to_user(row) if row is not None else None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        hashed_password=row.hashed_password,
        role=row.role,
        created_at=row.created_at,
    )
