# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Pydantic request / response models for user accounts.

Two distinct patch shapes exist on purpose: ``SelfProfilePatch`` is what a
regular user may change on their own account, ``AdminUserPatch`` is what an
admin may change on any account.  The service picks the shape from the
caller's role, so a non-admin payload simply has no slot for ``role``.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from core.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Pagination
from core.validators import blank_to_none, check_password_policy

Role = Literal["admin", "user"]


# -- Requests --------------------------------------------------------------


class SelfProfilePatch(BaseModel):
    # unknown keys (password, role, ...) are dropped, not rejected
    model_config = {"extra": "ignore"}

    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _blank(cls, v):
        v = blank_to_none(v)
        return v.strip() if isinstance(v, str) else v


class AdminUserPatch(BaseModel):
    model_config = {"extra": "ignore"}

    email: Optional[EmailStr] = None
    password: Optional[str] = None
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    @field_validator("email", "first_name", "last_name", mode="before")
    @classmethod
    def _blank(cls, v):
        v = blank_to_none(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("password", mode="before")
    @classmethod
    def _blank_password(cls, v):
        # the admin form posts an empty password to mean "keep current"
        return blank_to_none(v)

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: Optional[str]) -> Optional[str]:
        return check_password_policy(v) if v is not None else v


class AdminUserCreate(BaseModel):
    email: EmailStr
    password: str
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    role: Role = "user"
    is_active: bool = True

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        return check_password_policy(v)


class UserSearchParams(BaseModel):
    search: Optional[str] = Field(None, max_length=100)
    role: Optional[Role] = None
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


# -- Responses -------------------------------------------------------------


class UserOut(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserDetail(UserOut):
    student_count: int = 0


class UserListResponse(BaseModel):
    items: List[UserOut]
    pagination: Pagination
