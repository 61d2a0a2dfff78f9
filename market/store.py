"""
market/store.py -- SQLAlchemy-backed persistence for tasks and submissions.

Uses SQLAlchemy Core (not ORM) so the dataclasses in market/models.py remain
the authoritative domain representation.

Pattern: Repository + Data Mapper. MarketStore is the repository covering
the task catalog and the submission ledger. The _row_to_* functions are the
mappers. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = MarketStore("sqlite:///taskmarket.db")
    task_id = store.create_task(Task(title="Translate doc", reward=5.0))
    sub_id = store.create_submission(Submission(task_id=task_id, user_id=7, evidence="done"))
    store.set_status(sub_id, "approved")
    store.close()
"""

from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.config import get_settings
from core.db import create_db_engine, now_iso
from core.db import submissions as _submissions
from core.db import tasks as _tasks
from core.db import users as _users
from core.errors import InvalidStatus, InvalidStatusTransition, ReferenceNotFound, SubmissionNotFound
from market.models import Submission, SubmissionStatus, Task

# ---------------------------------------------------------------------------
# Status workflow
# ---------------------------------------------------------------------------

# pending is the only state with outgoing edges; approved and rejected are
# terminal. Nothing ever moves back to pending.
_TRANSITIONS: dict[str, frozenset] = {
    SubmissionStatus.pending.value: frozenset({SubmissionStatus.approved.value, SubmissionStatus.rejected.value}),
    SubmissionStatus.approved.value: frozenset(),
    SubmissionStatus.rejected.value: frozenset(),
}


def is_allowed_transition(from_status: str, to_status: str) -> bool:
    """Return True if a submission in from_status may move to to_status."""
    return to_status in _TRANSITIONS.get(from_status, frozenset())


def _parse_status(status) -> str:
    try:
        return SubmissionStatus(status).value
    except ValueError as exc:
        raise InvalidStatus(detail=f"unknown status {status!r}") from exc


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketStore:
    def __init__(self, db_url: Optional[str] = None) -> None:
        self.engine: Engine = create_db_engine(db_url or get_settings().database_url)

    # ------------------------------------------------------------------
    # Task catalog
    # ------------------------------------------------------------------

    def create_task(self, task: Task) -> int:
        """Insert a new task and return its assigned database ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _tasks.insert().values(
                    title=task.title,
                    description=task.description,
                    reward=task.reward,
                    created_at=now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_task(self, task_id: int) -> Optional[Task]:
        """Fetch a single task by ID. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_tasks.select().where(_tasks.c.id == task_id)).first()
        return _row_to_task(row) if row is not None else None

    def list_tasks(self) -> list[Task]:
        """Return every task, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_tasks.select().order_by(_tasks.c.created_at.desc(), _tasks.c.id.desc())).fetchall()
        return [_row_to_task(r) for r in rows]

    # ------------------------------------------------------------------
    # Submission ledger
    # ------------------------------------------------------------------

    def create_submission(self, submission: Submission) -> int:
        """Record a new submission and return its ID.

        The status is always pending on insert, whatever the dataclass says.
        Raises ReferenceNotFound when task_id or user_id does not exist --
        the foreign keys on the submissions table reject the row.
        """
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _submissions.insert().values(
                        task_id=submission.task_id,
                        user_id=submission.user_id,
                        evidence=submission.evidence,
                        status=SubmissionStatus.pending.value,
                        created_at=now_iso(),
                    )
                )
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as exc:
            raise ReferenceNotFound(
                detail=f"task_id={submission.task_id} user_id={submission.user_id}: {exc.orig}"
            ) from exc

    def get_submission(self, submission_id: int) -> Optional[Submission]:
        """Fetch a single submission (without join columns). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_submissions.select().where(_submissions.c.id == submission_id)).first()
        return _row_to_submission(row) if row is not None else None

    def list_all(self) -> list[Submission]:
        """Every submission with its task title and submitter name, newest first."""
        query = (
            select(_submissions, _tasks.c.title.label("task_title"), _users.c.name.label("user_name"))
            .select_from(
                _submissions.outerjoin(_tasks, _tasks.c.id == _submissions.c.task_id).outerjoin(
                    _users, _users.c.id == _submissions.c.user_id
                )
            )
            .order_by(_submissions.c.created_at.desc(), _submissions.c.id.desc())
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_submission(r) for r in rows]

    def list_for_user(self, user_id: int) -> list[Submission]:
        """Submissions made by user_id with their task title, newest first."""
        query = (
            select(_submissions, _tasks.c.title.label("task_title"))
            .select_from(_submissions.outerjoin(_tasks, _tasks.c.id == _submissions.c.task_id))
            .where(_submissions.c.user_id == user_id)
            .order_by(_submissions.c.created_at.desc(), _submissions.c.id.desc())
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_submission(r) for r in rows]

    def set_status(self, submission_id: int, status) -> None:
        """Move a submission to a new review status.

        Raises:
            InvalidStatus:           status is not a SubmissionStatus value.
            SubmissionNotFound:      no submission has this ID.
            InvalidStatusTransition: the move is not pending -> approved|rejected,
                                     including when another review got there first.
        """
        new_status = _parse_status(status)
        with self.engine.connect() as conn:
            current = conn.execute(
                select(_submissions.c.status).where(_submissions.c.id == submission_id)
            ).scalar_one_or_none()
            if current is None:
                raise SubmissionNotFound(detail=f"submission {submission_id}")
            if not is_allowed_transition(current, new_status):
                raise InvalidStatusTransition(detail=f"submission {submission_id}: {current} -> {new_status}")
            # The WHERE on the old status makes the check-and-set atomic: a
            # review that lands between the SELECT and here matches no row.
            result = conn.execute(
                _submissions.update()
                .where((_submissions.c.id == submission_id) & (_submissions.c.status == current))
                .values(status=new_status)
            )
            if result.rowcount == 0:
                conn.rollback()
                raise InvalidStatusTransition(detail=f"submission {submission_id} was reviewed concurrently")
            conn.commit()

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_task(row) -> Task:
    return Task(
        id=row.id,
        title=row.title,
        description=row.description,
        reward=row.reward,
        created_at=row.created_at,
    )


def _row_to_submission(row) -> Submission:
    # Join columns are absent on plain selects of the submissions table.
    mapping = row._mapping
    return Submission(
        id=row.id,
        task_id=row.task_id,
        user_id=row.user_id,
        evidence=row.evidence,
        status=row.status,
        created_at=row.created_at,
        task_title=mapping.get("task_title"),
        user_name=mapping.get("user_name"),
    )
