"""
auth/models.py -- Domain types for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in market/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or market/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """The closed set of roles. Fixed at registration; never changed."""

    admin = "admin"
    worker = "worker"


@dataclass
class User:
    """A registered account as stored in the users table.

    hashed_password is the bcrypt hash; the plaintext is never stored.
    id is None before the record is written to the database.
    """

    name: str
    email: str
    role: str  # Role value: "admin" | "worker"
    hashed_password: str = ""
    id: int | None = None
    created_at: str = ""


@dataclass(frozen=True)
class Caller:
    """The authenticated identity behind a request.

    Built from the verified JWT claims alone -- request handling never goes
    back to the users table to find out who is calling.
    """

    id: int
    email: str
    role: str
    name: str | None = None
