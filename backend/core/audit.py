# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Audit trail helper.

``record`` adds a ``SecurityLog`` row to the *caller's* session – it does not
commit.  The row therefore lands in the same transaction as the mutation it
describes: either both are persisted or neither is.
"""

from typing import Optional

from sqlalchemy.orm import Session

from core.logger import logger
from core.security import CallerContext
from models.security_log import SecurityLog

USER_REGISTERED = "USER_REGISTERED"
USER_LOGIN = "USER_LOGIN"
LOGIN_FAILED = "LOGIN_FAILED"
CHANGE_PASSWORD = "CHANGE_PASSWORD"
CREATE_USER = "CREATE_USER"
UPDATE_USER = "UPDATE_USER"
DELETE_USER = "DELETE_USER"
CREATE_STUDENT = "CREATE_STUDENT"
UPDATE_STUDENT = "UPDATE_STUDENT"
DELETE_STUDENT = "DELETE_STUDENT"
EXPORT_AUDIT_LOGS = "EXPORT_AUDIT_LOGS"


def record(
    db: Session,
    ctx: CallerContext,
    action: str,
    details: Optional[str] = None,
    user_id: Optional[int] = None,
) -> SecurityLog:
    """
    Stage an audit entry.  *user_id* overrides the actor taken from *ctx*
    (used by registration, where the actor is the account just created).
    """
    actor_id = user_id if user_id is not None else ctx.user_id
    entry = SecurityLog(
        user_id=actor_id,
        action=action,
        details=details,
        ip_address=ctx.ip_address[:45],
        user_agent=ctx.user_agent[:512],
    )
    db.add(entry)
    logger.info("audit %s | user=%s ip=%s | %s", action, actor_id, ctx.ip_address, details or "")
    return entry
