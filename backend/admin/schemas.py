# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Pydantic response models for the admin audit-trail endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class SecurityLogRow(BaseModel):
    id: int
    user_id: Optional[int] = None
    user_email: Optional[str] = None        # resolved from user_id join
    action: str
    details: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class SecurityLogListResponse(BaseModel):
    logs: List[SecurityLogRow]
