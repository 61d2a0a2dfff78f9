"""
API request and response models for the TaskMarket REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
market/models.py, which own the internal domain representation. Route
handlers map between the two.

Separation of concerns: domain dataclasses = domain truth; api/ models = API contract.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import Role
from market.models import Submission, SubmissionStatus, Task

# Largest value a SQLite INTEGER primary key can hold. Larger ids would
# overflow the driver instead of simply matching no row.
MAX_ROW_ID = 2**63 - 1

# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class CreatedResponse(BaseModel):
    """{message, id} returned by every create endpoint."""

    model_config = ConfigDict(frozen=True)

    message: str
    id: int


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register.

    email and password are optional at the schema level so a missing value
    produces the 400 missing_credentials error rather than a 422.
    """

    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=72)
    # None (or an omitted key) registers a worker.
    role: Optional[Role] = None


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=72)


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


class MeResponse(BaseModel):
    """Identity claims of the current session."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    role: str
    name: Optional[str]


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TaskCreate(BaseModel):
    """Request body for POST /api/tasks."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    reward: float = Field(ge=0)


class TaskResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: Optional[str]
    reward: float
    created_at: str

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            reward=task.reward,
            created_at=task.created_at,
        )


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------


class SubmissionCreate(BaseModel):
    """Request body for POST /api/submissions.

    Clients send taskId (camelCase); task_id is accepted too.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    task_id: int = Field(alias="taskId", le=MAX_ROW_ID)
    evidence: str = Field(min_length=1, max_length=5000)


class SubmissionStatusUpdate(BaseModel):
    """Request body for PUT /api/submissions/{id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    status: SubmissionStatus


class SubmissionRow(BaseModel):
    """One submission in a listing.

    user_name is only set in the admin listing; routes serialize with
    response_model_exclude_none so worker listings omit the key.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    task_id: int
    user_id: int
    evidence: str
    status: str
    created_at: str
    task_title: Optional[str] = None
    user_name: Optional[str] = None

    @classmethod
    def from_submission(cls, submission: Submission, include_submitter: bool = False) -> "SubmissionRow":
        """Build a row from the domain dataclass.

        The submitter name is dropped unless include_submitter is set, so
        a non-admin scope cannot leak it even if the query carried it.
        """
        return cls(
            id=submission.id,
            task_id=submission.task_id,
            user_id=submission.user_id,
            evidence=submission.evidence,
            status=submission.status,
            created_at=submission.created_at,
            task_title=submission.task_title,
            user_name=submission.user_name if include_submitter else None,
        )
