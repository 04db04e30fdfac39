# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Admin endpoints – read-only access to the security audit trail.

Every endpoint in this router is guarded by ``require_admin``.  A request
that carries a valid JWT but belongs to a ``user`` role will receive 403
before any query runs.  Nothing here modifies or deletes audit rows.
"""

import io
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from sqlalchemy.orm import Session

from database import get_db
from core import audit
from core.security import CallerContext, require_admin
from models.security_log import SecurityLog
from models.user import User
from admin.schemas import SecurityLogListResponse, SecurityLogRow

router = APIRouter(prefix="/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# GET /admin/audit-logs  – filtered audit trail, newest first
# ---------------------------------------------------------------------------


@router.get("/audit-logs", response_model=SecurityLogListResponse)
def list_audit_logs(
    action: Optional[str] = Query(None, description="Exact action tag, e.g. CREATE_STUDENT"),
    user_id: Optional[int] = Query(None, description="Acting user id"),
    since: Optional[datetime] = Query(None, description="ISO-8601 start of time window"),
    until: Optional[datetime] = Query(None, description="ISO-8601 end of time window"),
    limit: int = Query(200, ge=1, le=1000),
    admin: CallerContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Return audit rows newest-first.  Supports optional filters:

    * ``action``  – one exact action tag.
    * ``user_id`` – rows whose actor is this user.
    * ``since`` / ``until`` – ISO-8601 bounds on ``created_at``.
    * ``limit`` – max rows returned (default 200, cap 1000).
    """
    q = db.query(SecurityLog, User.email).outerjoin(User, SecurityLog.user_id == User.id)

    if action:
        q = q.filter(SecurityLog.action == action)
    if user_id is not None:
        q = q.filter(SecurityLog.user_id == user_id)
    if since:
        q = q.filter(SecurityLog.created_at >= since)
    if until:
        q = q.filter(SecurityLog.created_at <= until)

    rows = q.order_by(SecurityLog.created_at.desc(), SecurityLog.id.desc()).limit(limit).all()

    return SecurityLogListResponse(
        logs=[
            SecurityLogRow(
                id=row.id,
                user_id=row.user_id,
                user_email=email,
                action=row.action,
                details=row.details,
                ip_address=row.ip_address,
                user_agent=row.user_agent,
                created_at=row.created_at,
            )
            for row, email in rows
        ]
    )


# ---------------------------------------------------------------------------
# GET /admin/audit-logs/export  – download the audit trail as Excel
# ---------------------------------------------------------------------------

_AUDIT_HEADER_FONT  = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
_AUDIT_HEADER_FILL  = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
_AUDIT_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")
_AUDIT_THIN_BORDER  = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)

_AUDIT_EXPORT_HEADERS = ["ID", "Time", "User", "Action", "IP Address", "User Agent", "Details"]
_AUDIT_COL_MIN = [8, 20, 28, 20, 16, 30, 50]


@router.get("/audit-logs/export")
def export_audit_logs(
    admin: CallerContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Export the whole audit trail as an .xlsx file, streamed from memory."""
    rows = (
        db.query(SecurityLog, User.email)
        .outerjoin(User, SecurityLog.user_id == User.id)
        .order_by(SecurityLog.created_at.desc(), SecurityLog.id.desc())
        .all()
    )

    wb = Workbook()
    ws = wb.active
    ws.title = "Security Logs"

    # Header row
    ws.append(_AUDIT_EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = _AUDIT_HEADER_FONT
        cell.fill = _AUDIT_HEADER_FILL
        cell.alignment = _AUDIT_HEADER_ALIGN
        cell.border = _AUDIT_THIN_BORDER

    # Data rows
    for row, email in rows:
        ws.append([
            row.id,
            row.created_at.strftime("%Y-%m-%d %H:%M:%S") if row.created_at else "",
            email or "",
            row.action,
            row.ip_address or "",
            row.user_agent or "",
            row.details or "",
        ])
        row_idx = ws.max_row
        for col_idx in range(1, len(_AUDIT_EXPORT_HEADERS) + 1):
            ws.cell(row=row_idx, column=col_idx).border = _AUDIT_THIN_BORDER

    # Column widths
    for col_idx, min_w in enumerate(_AUDIT_COL_MIN, start=1):
        ws.column_dimensions[chr(64 + col_idx)].width = min_w

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    wb.close()

    # The export itself is an auditable event
    audit.record(db, admin, audit.EXPORT_AUDIT_LOGS, f"Exported {len(rows)} audit row(s) to Excel")
    db.commit()

    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="security-logs.xlsx"'},
    )
