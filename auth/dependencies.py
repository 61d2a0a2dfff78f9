"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Requests authenticate with an Authorization: Bearer <token> header carrying
a JWT issued by POST /api/auth/login. The verified claims become a Caller;
the users table is not consulted.

try_get_current_user() is the soft variant (returns None when no header).
get_current_user() raises MissingToken (401) / InvalidToken (401).
require_publisher() and require_reviewer() wrap get_current_user() and raise
PermissionDenied (403) when the access policy refuses the caller.

Layer rule: no imports from api/ or market/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import Caller
from auth.policy import can_publish_task, can_review_submission
from auth.tokens import decode_access_token
from core.errors import InvalidToken, MissingToken, PermissionDenied


def _bearer_token(request: Request) -> str | None:
    """Return the raw token from the Authorization header, "" if malformed, None if absent."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def _caller_from_claims(payload: dict) -> Caller:
    return Caller(
        id=int(payload["id"]),
        email=payload["email"],
        role=payload["role"],
        name=payload.get("name"),
    )


def get_current_user(request: Request) -> Caller:
    """Require authentication.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(caller: Caller = Depends(get_current_user)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise MissingToken()
    if not token:
        raise InvalidToken(detail="Authorization header is not a Bearer token")
    payload = decode_access_token(token)
    if payload is None:
        raise InvalidToken(detail="token failed verification")
    return _caller_from_claims(payload)


def try_get_current_user(request: Request) -> Caller | None:
    """Optional authentication: None when no Authorization header is sent.

    A header that is present but invalid still raises InvalidToken -- a
    client that meant to authenticate should hear that it failed.
    """
    if request.headers.get("Authorization") is None:
        return None
    return get_current_user(request)


def require_publisher(request: Request) -> Caller:
    """Require a caller allowed to publish tasks. 401 if unauthenticated, 403 otherwise.

    Use as a FastAPI dependency:
        @router.post("/tasks")
        def route(caller: Caller = Depends(require_publisher)): ...
    """
    caller = get_current_user(request)
    if not can_publish_task(caller):
        raise PermissionDenied(detail=f"user {caller.id} ({caller.role}) may not publish tasks")
    return caller


def require_reviewer(request: Request) -> Caller:
    """Require a caller allowed to approve or reject submissions."""
    caller = get_current_user(request)
    if not can_review_submission(caller):
        raise PermissionDenied(detail=f"user {caller.id} ({caller.role}) may not review submissions")
    return caller
