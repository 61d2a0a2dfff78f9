"""
api/routes/submissions.py -- Submission ledger routes.

Routes (in registration order):
  POST /api/submissions        -- submit evidence for a task (any authenticated user)
  GET  /api/submissions        -- admin: every submission; others: their own
  GET  /api/submissions/mine   -- the caller's own submissions, any role
  PUT  /api/submissions/{id}   -- approve or reject (admin only)

Scoping is decided by auth/policy.py; this module only dispatches to the
matching store query. Review moves are validated by MarketStore.set_status:
only pending -> approved | rejected is accepted.
"""

from fastapi import APIRouter, Depends, Path, Request

from api.models import (
    MAX_ROW_ID,
    CreatedResponse,
    MessageResponse,
    SubmissionCreate,
    SubmissionRow,
    SubmissionStatusUpdate,
)
from auth.dependencies import get_current_user, require_reviewer
from auth.models import Caller
from auth.policy import SubmissionScope, own_submissions_scope, submission_owner, submission_scope
from market.models import Submission
from market.store import MarketStore

# Auth policy:
# - POST /api/submissions:       requires auth; user_id is always the caller
# - GET  /api/submissions:       requires auth; scope from submission_scope()
# - GET  /api/submissions/mine:  requires auth; scope from own_submissions_scope()
# - PUT  /api/submissions/{id}:  requires admin (require_reviewer -> can_review_submission)
router = APIRouter()


def _list_scoped(market: MarketStore, scope: SubmissionScope) -> list[SubmissionRow]:
    rows = market.list_all() if scope.user_id is None else market.list_for_user(scope.user_id)
    return [SubmissionRow.from_submission(s, include_submitter=scope.include_submitter) for s in rows]


@router.post("/submissions", response_model=CreatedResponse, status_code=201)
def create_submission(
    request: Request,
    body: SubmissionCreate,
    caller: Caller = Depends(get_current_user),
) -> CreatedResponse:
    """Record evidence for a task on behalf of the caller.

    Returns 404 reference_not_found when the task does not exist.
    """
    market: MarketStore = request.app.state.market
    submission_id = market.create_submission(
        Submission(task_id=body.task_id, user_id=submission_owner(caller), evidence=body.evidence)
    )
    return CreatedResponse(message="Submission created.", id=submission_id)


@router.get("/submissions", response_model=list[SubmissionRow], response_model_exclude_none=True)
def list_submissions(request: Request, caller: Caller = Depends(get_current_user)) -> list[SubmissionRow]:
    """Admins get every submission with submitter names; others get their own."""
    return _list_scoped(request.app.state.market, submission_scope(caller))


@router.get("/submissions/mine", response_model=list[SubmissionRow], response_model_exclude_none=True)
def list_my_submissions(request: Request, caller: Caller = Depends(get_current_user)) -> list[SubmissionRow]:
    return _list_scoped(request.app.state.market, own_submissions_scope(caller))


@router.put("/submissions/{submission_id}", response_model=MessageResponse)
def update_submission_status(
    request: Request,
    body: SubmissionStatusUpdate,
    submission_id: int = Path(le=MAX_ROW_ID),
    caller: Caller = Depends(require_reviewer),
) -> MessageResponse:
    """Approve or reject a pending submission. Admin only.

    404 submission_not_found for an unknown id; 409 invalid_transition when
    the submission has already been reviewed or the target is pending.
    """
    market: MarketStore = request.app.state.market
    market.set_status(submission_id, body.status)
    return MessageResponse(message="Status updated.")
