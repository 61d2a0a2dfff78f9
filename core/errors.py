"""
core/errors.py -- Domain error taxonomy for TaskMarket.

Every failure a caller can observe is one of these classes. Each carries the
HTTP status, a stable machine-readable code, and a generic public message.
The optional detail is for server-side logs only -- api/main.py renders the
code and message and never echoes detail or the underlying store error.

Stores, token helpers and the access policy raise these; they do not know
about HTTP. The single exception handler in api/main.py turns them into the
ErrorResponse envelope.

Layer rule: core/ is the kernel. No imports from api/, auth/, or market/.
"""

from __future__ import annotations


class TaskMarketError(Exception):
    """Base class for every classified TaskMarket failure."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, *, detail: str | None = None) -> None:
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# 400 -- bad input
# ---------------------------------------------------------------------------


class MissingCredentials(TaskMarketError):
    status_code = 400
    code = "missing_credentials"
    message = "Email and password are required."


class InvalidCredentials(TaskMarketError):
    """Login failed. Subclasses say why; the public response never does."""

    status_code = 400
    code = "bad_credentials"
    message = "Invalid email or password."


class UnknownEmail(InvalidCredentials):
    pass


class WrongPassword(InvalidCredentials):
    pass


class InvalidStatus(TaskMarketError):
    status_code = 400
    code = "invalid_status"
    message = "Status must be one of: pending, approved, rejected."


# ---------------------------------------------------------------------------
# 401 / 403 -- authentication and authorization
# ---------------------------------------------------------------------------


class MissingToken(TaskMarketError):
    status_code = 401
    code = "missing_token"
    message = "Authentication required."


class InvalidToken(TaskMarketError):
    status_code = 401
    code = "invalid_token"
    message = "Invalid or expired token."


class PermissionDenied(TaskMarketError):
    status_code = 403
    code = "forbidden"
    message = "Admin access required."


# ---------------------------------------------------------------------------
# 404 -- absent rows
# ---------------------------------------------------------------------------


class NotFound(TaskMarketError):
    status_code = 404
    code = "not_found"
    message = "Resource not found."


class SubmissionNotFound(NotFound):
    code = "submission_not_found"
    message = "Submission not found."


class ReferenceNotFound(NotFound):
    code = "reference_not_found"
    message = "The referenced task or user does not exist."


# ---------------------------------------------------------------------------
# 409 -- state conflicts
# ---------------------------------------------------------------------------


class Conflict(TaskMarketError):
    status_code = 409
    code = "conflict"
    message = "The request conflicts with the current state."


class EmailAlreadyRegistered(Conflict):
    code = "email_taken"
    message = "A user with that email already exists."


class InvalidStatusTransition(Conflict):
    code = "invalid_transition"
    message = "Only pending submissions can be approved or rejected."


# ---------------------------------------------------------------------------
# 500 -- store failures
# ---------------------------------------------------------------------------


class StoreFailure(TaskMarketError):
    status_code = 500
    code = "store_failure"
    message = "The data store could not complete the request."
