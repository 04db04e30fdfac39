# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
User account operations.

Permission matrix
-----------------
* register / authenticate      – anyone
* get / update                 – the account owner or an admin
* create / list / delete       – admin only; an admin can never delete
                                 their own account

Every function takes an explicit ``CallerContext``; none of them reads
request or session state on its own.  Mutations stage a ``SecurityLog`` row
in the same transaction.
"""

from datetime import datetime, timezone
from typing import Any, List, Mapping, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from auth.schemas import ChangePasswordRequest, LoginRequest, RegisterRequest
from core import audit
from core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    commit_or_conflict,
    flush_or_conflict,
    service_operation,
)
from core.pagination import Pagination, paginate
from core.security import (
    ROLE_USER,
    CallerContext,
    create_access_token,
    hash_password,
    verify_password,
)
from core.validators import validate_payload
from models.student import Student
from models.user import User
from users.schemas import (
    AdminUserCreate,
    AdminUserPatch,
    SelfProfilePatch,
    UserDetail,
    UserOut,
    UserSearchParams,
)

_EMAIL_CONFLICT = {"email": "User with this email already exists"}

# Generic message used for both "no such email" and "wrong password"
_LOGIN_FAIL = "Invalid email or password"


def _load(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def _email_taken(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == email).first() is not None


def _require_admin(ctx: CallerContext) -> None:
    if not ctx.is_admin:
        raise ForbiddenError("Forbidden: Admin access required")


# ---------------------------------------------------------------------------
# Self-service
# ---------------------------------------------------------------------------


@service_operation("register user")
def register(db: Session, data: RegisterRequest, ctx: CallerContext) -> User:
    """Create a regular, active account.  The role is never caller-chosen."""
    if _email_taken(db, data.email):
        raise ConflictError(_EMAIL_CONFLICT["email"], field="email")

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        role=ROLE_USER,
        is_active=True,
    )
    db.add(user)
    flush_or_conflict(db, _EMAIL_CONFLICT)  # get user.id before the audit row
    audit.record(db, ctx, audit.USER_REGISTERED, f"email={user.email}", user_id=user.id)
    commit_or_conflict(db, _EMAIL_CONFLICT)
    db.refresh(user)
    return user


@service_operation("authenticate")
def authenticate(db: Session, data: LoginRequest, ctx: CallerContext) -> Tuple[str, User]:
    """
    Verify credentials and return ``(access_token, user)``.

    Unknown email and wrong password share one message so the endpoint cannot
    be used to enumerate accounts.
    """
    user = db.query(User).filter(User.email == data.email).first()

    if not user or not verify_password(data.password, user.password_hash):
        audit.record(
            db,
            ctx,
            audit.LOGIN_FAILED,
            f"email={data.email}",
            user_id=user.id if user else None,
        )
        db.commit()
        raise UnauthorizedError(_LOGIN_FAIL)

    if not user.is_active:
        audit.record(db, ctx, audit.LOGIN_FAILED, "account disabled", user_id=user.id)
        db.commit()
        raise UnauthorizedError("Account disabled")

    user.last_login = datetime.now(timezone.utc)
    audit.record(db, ctx, audit.USER_LOGIN, user_id=user.id)
    db.commit()
    db.refresh(user)

    token = create_access_token({"sub": user.email, "user_id": user.id, "role": user.role})
    return token, user


@service_operation("change password")
def change_password(db: Session, ctx: CallerContext, data: ChangePasswordRequest) -> None:
    """Change the caller's own password after re-checking the old one."""
    user = _load(db, ctx.user_id)
    if not verify_password(data.old_password, user.password_hash):
        raise BadRequestError("Old password is incorrect")

    user.password_hash = hash_password(data.new_password)
    user.updated_at = datetime.now(timezone.utc)
    audit.record(db, ctx, audit.CHANGE_PASSWORD, f"user_id={user.id}")
    db.commit()


# ---------------------------------------------------------------------------
# Owner-or-admin
# ---------------------------------------------------------------------------


@service_operation("get user")
def get_user(db: Session, user_id: int, ctx: CallerContext) -> UserDetail:
    """Return the account plus the number of students it created."""
    if not ctx.is_admin and ctx.user_id != user_id:
        raise ForbiddenError()

    user = _load(db, user_id)
    student_count = (
        db.query(func.count(Student.id)).filter(Student.created_by_id == user.id).scalar()
    )
    return UserDetail(**UserOut.model_validate(user).model_dump(), student_count=student_count)


@service_operation("update user")
def update_user(db: Session, user_id: int, ctx: CallerContext, payload: Mapping[str, Any]) -> User:
    """
    Apply *payload* to the account.

    Non-admins are held to ``SelfProfilePatch`` – any key other than the two
    name fields is dropped without error.  Admins get ``AdminUserPatch``; a
    field changes only when it is present in the payload.
    """
    if not ctx.is_admin and ctx.user_id != user_id:
        raise ForbiddenError()

    user = _load(db, user_id)

    if ctx.is_admin:
        patch = validate_payload(AdminUserPatch, payload)
    else:
        patch = validate_payload(SelfProfilePatch, payload)
    changes = patch.model_dump(exclude_none=True)

    new_email = changes.pop("email", None)
    if new_email is not None and new_email != user.email:
        if _email_taken(db, new_email):
            raise ConflictError("Email already exists", field="email")
        user.email = new_email

    new_password = changes.pop("password", None)
    if new_password is not None:
        user.password_hash = hash_password(new_password)

    for field, value in changes.items():
        setattr(user, field, value)
    user.updated_at = datetime.now(timezone.utc)

    touched = sorted(patch.model_dump(exclude_none=True))
    detail = f"Updated user: {user.email}"
    if touched:
        detail += " (" + ", ".join(touched) + ")"
    audit.record(db, ctx, audit.UPDATE_USER, detail)
    commit_or_conflict(db, {"email": "Email already exists"})
    db.refresh(user)
    return user


# ---------------------------------------------------------------------------
# Admin-only
# ---------------------------------------------------------------------------


@service_operation("create user")
def create_user(db: Session, data: AdminUserCreate, ctx: CallerContext) -> User:
    _require_admin(ctx)
    if _email_taken(db, data.email):
        raise ConflictError("Email already exists", field="email")

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        role=data.role,
        is_active=data.is_active,
    )
    db.add(user)
    audit.record(db, ctx, audit.CREATE_USER, f"Created user: {data.email} (role={data.role})")
    commit_or_conflict(db, {"email": "Email already exists"})
    db.refresh(user)
    return user


@service_operation("list users")
def list_users(db: Session, params: UserSearchParams, ctx: CallerContext) -> Tuple[List[User], Pagination]:
    _require_admin(ctx)

    q = db.query(User)
    if params.search:
        term = params.search
        q = q.filter(
            or_(
                User.email.contains(term, autoescape=True),
                User.first_name.contains(term, autoescape=True),
                User.last_name.contains(term, autoescape=True),
            )
        )
    if params.role:
        q = q.filter(User.role == params.role)

    q = q.order_by(User.created_at.desc(), User.id.desc())
    return paginate(q, params.page, params.limit)


@service_operation("delete user")
def delete_user(db: Session, user_id: int, ctx: CallerContext) -> None:
    """
    Hard-delete an account.  Students it created are kept; their
    ``created_by_id`` no longer resolves.
    """
    _require_admin(ctx)
    if ctx.user_id == user_id:
        raise BadRequestError("Cannot delete your own account")

    user = _load(db, user_id)
    email = user.email
    db.delete(user)
    audit.record(db, ctx, audit.DELETE_USER, f"Deleted user: {email}")
    db.commit()
