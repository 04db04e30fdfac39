# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from core.validators import check_password_policy


# -- Requests --------------------------------------------------------------


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    # Optional echo of the password typed twice in the form
    confirm_password: Optional[str] = None
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        return check_password_policy(v)

    @field_validator("confirm_password")
    @classmethod
    def _passwords_match(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        password = info.data.get("password")
        if v is not None and password is not None and v != password:
            raise ValueError("Passwords do not match")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        return check_password_policy(v)


# -- Responses -------------------------------------------------------------


class LoginResponse(BaseModel):
    access_token: str
    token_type: str  # always "bearer"
