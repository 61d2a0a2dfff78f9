"""
tests/test_market_store.py -- Unit tests for MarketStore and the status workflow.

Each test gets its own named in-memory database shared by a UserStore and a
MarketStore, so the submissions foreign keys have real rows to point at.
"""

from __future__ import annotations

import uuid
from collections.abc import Generator

import pytest

from auth.models import Role
from auth.store import UserStore
from auth.tokens import register_user
from core.errors import InvalidStatus, InvalidStatusTransition, ReferenceNotFound, SubmissionNotFound
from market.models import Submission, SubmissionStatus, Task
from market.store import MarketStore, is_allowed_transition


@pytest.fixture()
def stores() -> Generator[tuple[UserStore, MarketStore], None, None]:
    url = f"sqlite:///file:market_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    users, market = UserStore(url), MarketStore(url)
    yield users, market
    market.close()
    users.close()


@pytest.fixture()
def worker_id(stores: tuple[UserStore, MarketStore]) -> int:
    users, _ = stores
    return register_user(users, "Wanda", "wanda@test.local", "workerpass1")


# ---------------------------------------------------------------------------
# Task catalog
# ---------------------------------------------------------------------------


def test_create_and_get_task(stores: tuple[UserStore, MarketStore]) -> None:
    _, market = stores
    task_id = market.create_task(Task(title="Translate doc", description="EN -> PT", reward=5.0))
    task = market.get_task(task_id)
    assert task is not None
    assert task.title == "Translate doc"
    assert task.reward == 5.0
    assert task.created_at


def test_get_missing_task_returns_none(stores: tuple[UserStore, MarketStore]) -> None:
    _, market = stores
    assert market.get_task(12345) is None


def test_list_tasks_newest_first(stores: tuple[UserStore, MarketStore]) -> None:
    _, market = stores
    ids = [market.create_task(Task(title=f"t{i}", reward=1.0)) for i in range(3)]
    assert [t.id for t in market.list_tasks()] == list(reversed(ids))


def test_list_tasks_empty(stores: tuple[UserStore, MarketStore]) -> None:
    _, market = stores
    assert market.list_tasks() == []


# ---------------------------------------------------------------------------
# Submission ledger
# ---------------------------------------------------------------------------


def test_new_submission_is_always_pending(stores: tuple[UserStore, MarketStore], worker_id: int) -> None:
    _, market = stores
    task_id = market.create_task(Task(title="Label images", reward=2.0))
    sub_id = market.create_submission(
        Submission(task_id=task_id, user_id=worker_id, evidence="done", status=SubmissionStatus.approved.value)
    )
    assert market.get_submission(sub_id).status == "pending"


def test_submission_to_missing_task_rejected(stores: tuple[UserStore, MarketStore], worker_id: int) -> None:
    _, market = stores
    with pytest.raises(ReferenceNotFound):
        market.create_submission(Submission(task_id=999, user_id=worker_id, evidence="ghost"))


def test_submission_from_missing_user_rejected(stores: tuple[UserStore, MarketStore]) -> None:
    _, market = stores
    task_id = market.create_task(Task(title="Orphan", reward=1.0))
    with pytest.raises(ReferenceNotFound):
        market.create_submission(Submission(task_id=task_id, user_id=999, evidence="nobody"))


def test_list_all_carries_join_columns(stores: tuple[UserStore, MarketStore], worker_id: int) -> None:
    _, market = stores
    task_id = market.create_task(Task(title="Translate doc", reward=5.0))
    market.create_submission(Submission(task_id=task_id, user_id=worker_id, evidence="done"))
    (row,) = market.list_all()
    assert row.task_title == "Translate doc"
    assert row.user_name == "Wanda"


def test_list_for_user_is_exact(stores: tuple[UserStore, MarketStore], worker_id: int) -> None:
    users, market = stores
    other = register_user(users, "Otto", "otto@test.local", "ottopass12")
    task_id = market.create_task(Task(title="Survey", reward=1.0))
    mine = [market.create_submission(Submission(task_id=task_id, user_id=worker_id, evidence=f"w{i}")) for i in range(2)]
    market.create_submission(Submission(task_id=task_id, user_id=other, evidence="otto"))

    rows = market.list_for_user(worker_id)
    assert [r.id for r in rows] == list(reversed(mine))
    assert all(r.user_name is None for r in rows)
    assert all(r.task_title == "Survey" for r in rows)
    assert len(market.list_all()) == 3


# ---------------------------------------------------------------------------
# Status workflow
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "from_status,to_status,allowed",
    [
        ("pending", "approved", True),
        ("pending", "rejected", True),
        ("pending", "pending", False),
        ("approved", "rejected", False),
        ("rejected", "approved", False),
        ("approved", "pending", False),
    ],
)
def test_is_allowed_transition(from_status: str, to_status: str, allowed: bool) -> None:
    assert is_allowed_transition(from_status, to_status) is allowed


def test_set_status_approves_pending(stores: tuple[UserStore, MarketStore], worker_id: int) -> None:
    _, market = stores
    task_id = market.create_task(Task(title="Review me", reward=1.0))
    sub_id = market.create_submission(Submission(task_id=task_id, user_id=worker_id, evidence="ok"))
    market.set_status(sub_id, SubmissionStatus.approved)
    assert market.get_submission(sub_id).status == "approved"


def test_set_status_terminal_is_final(stores: tuple[UserStore, MarketStore], worker_id: int) -> None:
    _, market = stores
    task_id = market.create_task(Task(title="Once only", reward=1.0))
    sub_id = market.create_submission(Submission(task_id=task_id, user_id=worker_id, evidence="ok"))
    market.set_status(sub_id, "rejected")
    with pytest.raises(InvalidStatusTransition):
        market.set_status(sub_id, "approved")
    assert market.get_submission(sub_id).status == "rejected"


def test_set_status_unknown_submission(stores: tuple[UserStore, MarketStore]) -> None:
    _, market = stores
    with pytest.raises(SubmissionNotFound):
        market.set_status(404, "approved")


def test_set_status_unknown_value(stores: tuple[UserStore, MarketStore], worker_id: int) -> None:
    _, market = stores
    task_id = market.create_task(Task(title="Odd", reward=1.0))
    sub_id = market.create_submission(Submission(task_id=task_id, user_id=worker_id, evidence="ok"))
    with pytest.raises(InvalidStatus):
        market.set_status(sub_id, "paid")
    assert market.get_submission(sub_id).status == "pending"


def test_ping(stores: tuple[UserStore, MarketStore]) -> None:
    _, market = stores
    assert market.ping() is True


def test_admin_role_stored(stores: tuple[UserStore, MarketStore]) -> None:
    users, _ = stores
    uid = register_user(users, "Boss", "boss@test.local", "bosspass12", Role.admin)
    assert users.get_by_id(uid).role == "admin"
