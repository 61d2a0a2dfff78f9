"""
api/routes/auth.py -- Registration, login and session identity endpoints.

Routes:
  POST /api/auth/register  -- create an account (public; role defaults to worker)
  POST /api/auth/login     -- email/password login; returns a bearer JWT
  GET  /api/auth/me        -- claims of the current token (requires auth)

Security:
  POST /login is rate-limited per client IP (LOGIN_RATE_LIMIT).
  authenticate_user() provides timing equalization -- use it, never inline
  get_by_email() + verify_password().
  Cache-Control: no-store on login responses so the token is not cached.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import CreatedResponse, LoginRequest, LoginResponse, MeResponse, RegisterRequest
from auth.dependencies import get_current_user, try_get_current_user
from auth.models import Caller, Role
from auth.policy import can_register_role
from auth.store import UserStore
from auth.tokens import authenticate_user, create_access_token, register_user
from core.config import get_settings
from core.errors import MissingCredentials, PermissionDenied

logger = logging.getLogger("taskmarket.api.auth")

# Auth policy:
# - POST /api/auth/register: public -- admin role may need an admin token (see can_register_role)
# - POST /api/auth/login:    public -- login endpoint must be unauthenticated
# - GET  /api/auth/me:       requires auth (get_current_user)
router = APIRouter()


@router.post("/auth/register", response_model=CreatedResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> CreatedResponse:
    """Create a worker (or, where allowed, admin) account.

    Returns 400 missing_credentials when email or password is empty and
    409 email_taken when the email is already registered.
    """
    if not body.email or not body.password:
        raise MissingCredentials()

    role = body.role or Role.worker
    settings = get_settings()
    caller: Caller | None = None
    if role is Role.admin and not settings.admin_self_registration:
        caller = try_get_current_user(request)
    if not can_register_role(role, caller, settings.admin_self_registration):
        raise PermissionDenied("Only an admin can create admin accounts.")

    user_store: UserStore = request.app.state.user_store
    user_id = register_user(user_store, body.name, body.email, body.password, role)
    return CreatedResponse(message="User created.", id=user_id)


@router.post("/auth/login", response_model=LoginResponse)
@limiter.limit(get_settings().login_rate_limit)  # must be BELOW @router so the route calls the limited wrapper
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Exchange email and password for a signed session token.

    Unknown email and wrong password both return 400 bad_credentials; the
    distinction is only written to the server log.
    """
    if not body.email or not body.password:
        raise MissingCredentials()

    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.email, body.password)

    token = create_access_token(user.id, user.email, user.role, user.name)
    logger.info("User %d logged in", user.id)
    resp = JSONResponse(status_code=200, content=LoginResponse(token=token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=MeResponse)
def me(caller: Caller = Depends(get_current_user)) -> MeResponse:
    """Return the identity claims carried by the current token."""
    return MeResponse(id=caller.id, email=caller.email, role=caller.role, name=caller.name)
