"""
auth/policy.py -- Access policy: who may do what, and which rows they see.

Pure decision logic over a Caller. No I/O, no FastAPI -- routes and
dependencies call these functions before touching a store, so a refused
request never reaches the database.

The model has two tiers. Admins publish tasks, review submissions and see
every submission with its submitter's name. Everyone else sees only the
submissions they created. Listing tasks is open to anyone, and a new
submission always belongs to whoever made the request.

Layer rule: no imports from api/ or market/.
"""

from __future__ import annotations

from dataclasses import dataclass

from auth.models import Caller, Role


@dataclass(frozen=True)
class SubmissionScope:
    """Which submission rows a listing may return.

    user_id None means every row; otherwise only rows owned by user_id.
    include_submitter says whether rows carry the submitter's name.
    """

    user_id: int | None
    include_submitter: bool


def is_admin(caller: Caller) -> bool:
    return caller.role == Role.admin.value


def can_publish_task(caller: Caller) -> bool:
    return is_admin(caller)


def can_review_submission(caller: Caller) -> bool:
    return is_admin(caller)


def submission_scope(caller: Caller) -> SubmissionScope:
    """Scope for GET /submissions: admins see all rows, others their own."""
    if is_admin(caller):
        return SubmissionScope(user_id=None, include_submitter=True)
    return SubmissionScope(user_id=caller.id, include_submitter=False)


def own_submissions_scope(caller: Caller) -> SubmissionScope:
    """Scope for GET /submissions/mine: always the caller's rows, any role."""
    return SubmissionScope(user_id=caller.id, include_submitter=False)


def submission_owner(caller: Caller) -> int:
    """The user_id a new submission is recorded under -- always the caller."""
    return caller.id


def can_register_role(role: Role, caller: Caller | None, admin_self_registration: bool) -> bool:
    """Decide whether a registration request may create an account with role.

    Worker accounts are open to anyone. Admin accounts are open when
    admin_self_registration is on; otherwise an admin must be making the call.
    """
    if Role(role) is Role.worker:
        return True
    if admin_self_registration:
        return True
    return caller is not None and is_admin(caller)
