# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
User account endpoints.

Listing and creation are admin-only.  Read and update are open to the
account owner and to admins; delete is admin-only and never on self.  The
permission rules themselves live in ``users.service`` – the handlers here
only translate HTTP into service calls.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from core.security import CallerContext, get_caller
from core.validators import validate_payload
from users import service as user_service
from users.schemas import (
    AdminUserCreate,
    UserDetail,
    UserListResponse,
    UserOut,
    UserSearchParams,
)

router = APIRouter(prefix="/users", tags=["users"])


def _search_params(
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
) -> UserSearchParams:
    raw = {"search": search, "role": role, "page": page, "limit": limit}
    return validate_payload(UserSearchParams, {k: v for k, v in raw.items() if v not in (None, "")})


# ---------------------------------------------------------------------------
# GET /users  – paginated account list (admin)
# ---------------------------------------------------------------------------


@router.get("", response_model=UserListResponse)
def list_users(
    ctx: CallerContext = Depends(get_caller),
    params: UserSearchParams = Depends(_search_params),
    db: Session = Depends(get_db),
):
    users, pagination = user_service.list_users(db, params, ctx)
    return UserListResponse(items=users, pagination=pagination)


# ---------------------------------------------------------------------------
# POST /users  – admin creates an account with any role
# ---------------------------------------------------------------------------


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    body: AdminUserCreate,
    ctx: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return user_service.create_user(db, body, ctx)


# ---------------------------------------------------------------------------
# GET /users/{id}
# ---------------------------------------------------------------------------


@router.get("/{user_id}", response_model=UserDetail)
def get_user(
    user_id: int,
    ctx: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Own profile, or any profile for admins.  Includes ``student_count``."""
    return user_service.get_user(db, user_id, ctx)


# ---------------------------------------------------------------------------
# PUT /users/{id}
# ---------------------------------------------------------------------------


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    body: Dict[str, Any] = Body(...),
    ctx: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    The body is validated by the service: its accepted shape depends on
    whether the caller is an admin.
    """
    return user_service.update_user(db, user_id, ctx, body)


# ---------------------------------------------------------------------------
# DELETE /users/{id}
# ---------------------------------------------------------------------------


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    ctx: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    user_service.delete_user(db, user_id, ctx)
    return {"detail": "User deleted successfully"}
