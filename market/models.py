"""
market/models.py -- Domain dataclasses for the task marketplace.

These are pure data containers with zero logic. The submission status
workflow lives in market/store.py.

Separation of concerns: these dataclasses are the marketplace's domain truth,
just as auth/models.py is the account layer's. The API contract in
api/models.py maps to and from them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SubmissionStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


@dataclass
class Task:
    """A microtask published by an admin.

    Tasks are never updated or deleted once published.
    id is None before the record is written to the database.
    """

    title: str
    description: Optional[str] = None
    reward: float = 0.0
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class Submission:
    """A worker's evidence of having completed a task.

    task_title and user_name are read-only join columns filled in by the
    listing queries; they are ignored on insert. user_name is only populated
    for the admin listing.

    id is None before the record is written to the database.
    """

    task_id: int
    user_id: int
    evidence: str
    status: str = SubmissionStatus.pending.value
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    task_title: Optional[str] = None
    user_name: Optional[str] = None
