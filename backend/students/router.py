# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Student endpoints – listing, CRUD and the dashboard statistics.

Every endpoint requires a valid session.  Only DELETE is admin-gated; the
check is made by ``students.service.delete_student``.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from core.security import CallerContext, get_caller
from core.validators import validate_payload
from students import service as student_service
from students import statistics
from students.schemas import (
    StudentCreate,
    StudentListResponse,
    StudentOut,
    StudentSearchParams,
    StudentStatistics,
)

router = APIRouter(prefix="/students", tags=["students"])


def _search_params(
    search: Optional[str] = Query(None),
    status_: Optional[str] = Query(None, alias="status"),
    program: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
) -> StudentSearchParams:
    """
    Query parameters arrive as raw strings and are coerced by the schema, so
    a bad ``page`` or ``sort_by`` is reported like any other field error.
    Empty values count as absent.
    """
    raw = {
        "search": search,
        "status": status_,
        "program": program,
        "page": page,
        "limit": limit,
        "sort_by": sort_by,
        "sort_order": sort_order,
    }
    return validate_payload(StudentSearchParams, {k: v for k, v in raw.items() if v not in (None, "")})


# ---------------------------------------------------------------------------
# GET /students
# ---------------------------------------------------------------------------


@router.get("", response_model=StudentListResponse)
def list_students(
    ctx: CallerContext = Depends(get_caller),
    params: StudentSearchParams = Depends(_search_params),
    db: Session = Depends(get_db),
):
    students, pagination = student_service.list_students(db, params)
    return StudentListResponse(items=students, pagination=pagination)


# ---------------------------------------------------------------------------
# POST /students
# ---------------------------------------------------------------------------


@router.post("", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(
    body: StudentCreate,
    ctx: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return student_service.create_student(db, body, ctx)


# ---------------------------------------------------------------------------
# GET /students/statistics  – registered before /{student_pk}
# ---------------------------------------------------------------------------


@router.get("/statistics", response_model=StudentStatistics)
def get_statistics(
    ctx: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return statistics.compute(db)


# ---------------------------------------------------------------------------
# GET /students/{id}
# ---------------------------------------------------------------------------


@router.get("/{student_pk}", response_model=StudentOut)
def get_student(
    student_pk: int,
    ctx: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return student_service.get_student(db, student_pk)


# ---------------------------------------------------------------------------
# PUT /students/{id}  – partial update
# ---------------------------------------------------------------------------


@router.put("/{student_pk}", response_model=StudentOut)
def update_student(
    student_pk: int,
    body: Dict[str, Any] = Body(...),
    ctx: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return student_service.update_student(db, student_pk, body, ctx)


# ---------------------------------------------------------------------------
# DELETE /students/{id}  – admin only
# ---------------------------------------------------------------------------


@router.delete("/{student_pk}")
def delete_student(
    student_pk: int,
    ctx: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    student_service.delete_student(db, student_pk, ctx)
    return {"detail": "Student deleted successfully"}
