# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Central security module.  Password hashing, tokens and the auth guards live
here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. JWT creation / decoding                  (PyJWT / HS256)
3. Caller context                           (who is calling, from where)
4. FastAPI dependency guards                (get_current_user, get_caller,
                                             require_admin)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import ForbiddenError, UnauthorizedError
from database import get_db
from models.user import User

ROLE_ADMIN = "admin"
ROLE_USER = "user"
VALID_ROLES = (ROLE_ADMIN, ROLE_USER)

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------
# The salt is embedded in the passlib hash string.  Round count comes from
# settings so the test-suite can lower it.


def hash_password(plain: str) -> str:
    """Hash a plaintext password with PBKDF2-SHA256."""
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.
    """
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        # malformed hash string in the row
        return False


# ---------------------------------------------------------------------------
# 2.  JWT – access tokens
# ---------------------------------------------------------------------------


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a JWT with HS256.

    *data* should contain at minimum: sub (email), user_id, role.
    An ``exp`` claim is added automatically.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode["exp"] = expire
    return _jwt.encode(to_encode, settings.secret_key, algorithm="HS256")


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT.  Raises ``UnauthorizedError`` on any failure
    (expired, bad signature, malformed).
    """
    try:
        return _jwt.decode(token, settings.secret_key, algorithms=["HS256"])
    except _jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid or expired token")


# ---------------------------------------------------------------------------
# 3.  Caller context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CallerContext:
    """
    Everything a service needs to know about the caller.

    ``user_id`` and ``role`` are None for unauthenticated calls
    (registration, login).
    """

    user_id: Optional[int] = None
    role: Optional[str] = None
    ip_address: str = "unknown"
    user_agent: str = "unknown"

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def get_request_context(request: Request) -> CallerContext:
    """Dependency: anonymous context carrying only request metadata."""
    return CallerContext(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent", "unknown"),
    )


# ---------------------------------------------------------------------------
# 4.  FastAPI dependency guards
# ---------------------------------------------------------------------------

# The tokenUrl here is only used by the auto-generated OpenAPI docs;
# the actual login endpoint is POST /auth/login.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency: decode the JWT, load the User row, verify the account is
    active.  Returns the User ORM instance.

    Raises ``UnauthorizedError`` if the token is missing or invalid, or the
    user is gone/disabled.
    """
    if not token:
        raise UnauthorizedError("Not authenticated")

    payload = decode_access_token(token)
    user_id = payload.get("user_id")
    if user_id is None:
        raise UnauthorizedError("Invalid or expired token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise UnauthorizedError("User not found or inactive")
    return user


def get_caller(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> CallerContext:
    """Dependency: authenticated ``CallerContext`` for service calls."""
    anonymous = get_request_context(request)
    return CallerContext(
        user_id=current_user.id,
        role=current_user.role,
        ip_address=anonymous.ip_address,
        user_agent=anonymous.user_agent,
    )


def require_admin(caller: CallerContext = Depends(get_caller)) -> CallerContext:
    """
    Dependency: wraps :func:`get_caller` and additionally asserts
    ``role == 'admin'``.  Raises ``ForbiddenError`` otherwise.
    """
    if not caller.is_admin:
        raise ForbiddenError("Admin access required")
    return caller
