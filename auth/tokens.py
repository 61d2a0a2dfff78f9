"""
auth/tokens.py -- JWT, password hashing, registration and login.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       the identity claims id, email, role and name plus an expiry (7 days by
       default). Verification returns None on any failure -- the dependency
       layer turns that into InvalidToken (401).

  Passwords: bcrypt, used directly. The _DUMMY_HASH constant enables timing
       equalization in authenticate_user() so response time does not reveal
       whether an email is registered.

  Login failures: authenticate_user() raises UnknownEmail or WrongPassword.
       Both subclass InvalidCredentials and render as the same 400
       bad_credentials response; only the server log tells them apart.

  SECRET_KEY: sourced from core.config.get_settings(), which validates the
       key at startup.

Layer rule: no imports from api/ or market/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError

from auth.models import Role, User
from core.config import get_settings
from core.errors import EmailAlreadyRegistered, UnknownEmail, WrongPassword

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("taskmarket.auth")

_settings = get_settings()

_ALGORITHM = "HS256"

# Claims every session token must carry. A token signed with our key but
# missing one of these was not issued by create_access_token().
_REQUIRED_CLAIMS = ("id", "email", "role")

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes and newer releases raise on
    anything longer, so the input is cut to 72 bytes here and in
    verify_password() alike.
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8")[:72], salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8")[:72], hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the DB -- treat as a mismatch.
        return False


# Computed once at module load so the first login is not measurably slower.
_DUMMY_HASH: str = hash_password("taskmarket_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, email: str, role: str, name: str | None, expire_seconds: int = 0) -> str:
    """Encode a signed JWT carrying the caller's identity claims.

    Args:
        user_id:        Numeric user ID stored in the DB.
        email:          Login email.
        role:           "admin" or "worker".
        name:           Display name (may be None).
        expire_seconds: Session duration in seconds. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    expire = datetime.now(timezone.utc) + timedelta(seconds=duration)
    payload = {
        "id": user_id,
        "email": email,
        "role": role,
        "name": name,
        "exp": expire,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the claims dict or None on any failure.

    A token is rejected when the signature or expiry check fails, when a
    required claim is missing, or when the role is not a known Role.
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if any(claim not in payload for claim in _REQUIRED_CLAIMS):
        return None
    if payload["role"] not in {r.value for r in Role}:
        return None
    return payload


# ---------------------------------------------------------------------------
# Registration and login
# ---------------------------------------------------------------------------


def register_user(
    store: UserStore,
    name: str | None,
    email: str,
    password: str,
    role: Role = Role.worker,
) -> int:
    """Hash the password and create the account. Returns the new user ID.

    Raises EmailAlreadyRegistered when the email is taken. The existing
    account is left untouched.
    """
    user = User(name=name or "", email=email, role=Role(role).value, hashed_password=hash_password(password))
    try:
        user_id = store.create_user(user)
    except IntegrityError as exc:
        raise EmailAlreadyRegistered(detail=f"duplicate email {email!r}") from exc
    logger.info("Registered user %d (%s)", user_id, user.role)
    return user_id


def authenticate_user(store: UserStore, email: str, password: str) -> User:
    """Check an email/password pair with timing equalization.

    Always runs bcrypt whether or not the email exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH, then UnknownEmail
    - Wrong password: bcrypt runs against the real hash, then WrongPassword

    Returns the User on success.
    """
    user = store.get_by_email(email)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        raise UnknownEmail(detail=f"no account for {email!r}")
    if not verify_password(password, user.hashed_password):
        raise WrongPassword(detail=f"password mismatch for user {user.id}")
    return user


def ensure_admin_account(store: UserStore, name: str, email: str, password: str) -> bool:
    """Create the seed admin account unless that email is already registered.

    Returns True when a new account was created. An existing account with the
    same email is never modified, whatever its role.
    """
    if store.get_by_email(email) is not None:
        return False
    try:
        register_user(store, name, email, password, Role.admin)
    except EmailAlreadyRegistered:
        # Another process seeded it between the lookup and the insert.
        return False
    return True
