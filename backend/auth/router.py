# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – registration, login, password change, current-user info.

Security notes
--------------
* Registration always creates a ``user`` role account; promoting it is an
  admin action on /users/{id}.
* Login returns the *same* error message whether the email doesn't exist or
  the password is wrong.  This prevents user-enumeration attacks.
* change-password verifies the old password before accepting the new one,
  so a stolen (but not yet expired) token alone cannot reset the password.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from core.security import CallerContext, get_caller, get_current_user, get_request_context
from models.user import User
from users import service as user_service
from users.schemas import UserOut
from auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
)

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# POST /auth/register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    ctx: CallerContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Self-service sign-up.  The response never contains the password hash."""
    return user_service.register(db, body, ctx)


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    ctx: CallerContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Authenticate and return a signed JWT."""
    token, _ = user_service.authenticate(db, body, ctx)
    return LoginResponse(access_token=token, token_type="bearer")


# ---------------------------------------------------------------------------
# PUT /auth/change-password
# ---------------------------------------------------------------------------


@router.put("/change-password")
def change_password(
    body: ChangePasswordRequest,
    ctx: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Change the authenticated user's login password."""
    user_service.change_password(db, ctx, body)
    return {"detail": "Password changed successfully"}


# ---------------------------------------------------------------------------
# GET /auth/me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's public profile (no secrets)."""
    return current_user
