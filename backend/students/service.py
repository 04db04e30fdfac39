# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Student record operations.

Any authenticated caller may list, read, create and update students; only an
admin may delete one.  ``student_id`` and ``email`` are each unique across
all students: the pre-checks below name the colliding field, and the
database constraint catches whatever slips past them under concurrency.
"""

from datetime import datetime, timezone
from typing import Any, List, Mapping, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from core import audit
from core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    commit_or_conflict,
    service_operation,
)
from core.pagination import Pagination, paginate
from core.security import CallerContext
from core.validators import validate_payload
from models.student import Student
from students.schemas import StudentCreate, StudentSearchParams, StudentSortField, StudentUpdate

# Checked in this order, so a payload colliding on both reports student_id
_UNIQUE_FIELDS = {
    "student_id": "Student ID already exists",
    "email": "Email already exists",
}

# Closed mapping from the public sort key to the ORM column
_SORT_COLUMNS = {field: getattr(Student, field.value) for field in StudentSortField}


def _load(db: Session, student_pk: int) -> Student:
    student = db.query(Student).filter(Student.id == student_pk).first()
    if not student:
        raise NotFoundError("Student not found")
    return student


def _check_unique(db: Session, values: Mapping[str, Any], exclude_pk: int = None) -> None:
    """Raise ``ConflictError`` for the first unique column already in use."""
    for column, message in _UNIQUE_FIELDS.items():
        value = values.get(column)
        if value is None:
            continue
        q = db.query(Student.id).filter(getattr(Student, column) == value)
        if exclude_pk is not None:
            q = q.filter(Student.id != exclude_pk)
        if q.first() is not None:
            raise ConflictError(message, field=column)


def _describe(student: Student) -> str:
    return f"{student.first_name} {student.last_name} ({student.student_id})"


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@service_operation("list students")
def list_students(db: Session, params: StudentSearchParams) -> Tuple[List[Student], Pagination]:
    """
    Filtered, sorted, paginated listing.

    ``search`` is a substring match OR-ed over first name, last name, email
    and student id; ``status`` and ``program`` are exact matches AND-ed with
    it.
    """
    q = db.query(Student)

    if params.search:
        # literal substring: % and _ in the term are escaped
        term = params.search
        q = q.filter(
            or_(
                Student.first_name.contains(term, autoescape=True),
                Student.last_name.contains(term, autoescape=True),
                Student.email.contains(term, autoescape=True),
                Student.student_id.contains(term, autoescape=True),
            )
        )
    if params.status:
        q = q.filter(Student.status == params.status)
    if params.program:
        q = q.filter(Student.program == params.program)

    column = _SORT_COLUMNS[params.sort_by]
    if params.sort_order == "asc":
        q = q.order_by(column.asc(), Student.id.asc())
    else:
        q = q.order_by(column.desc(), Student.id.desc())

    return paginate(q, params.page, params.limit)


@service_operation("get student")
def get_student(db: Session, student_pk: int) -> Student:
    return _load(db, student_pk)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


@service_operation("create student")
def create_student(db: Session, data: StudentCreate, ctx: CallerContext) -> Student:
    values = data.model_dump()
    _check_unique(db, values)

    student = Student(**values, created_by_id=ctx.user_id)
    db.add(student)
    audit.record(db, ctx, audit.CREATE_STUDENT, f"Created student: {_describe(student)}")
    commit_or_conflict(db, _UNIQUE_FIELDS)
    db.refresh(student)
    return student


@service_operation("update student")
def update_student(db: Session, student_pk: int, payload: Mapping[str, Any], ctx: CallerContext) -> Student:
    """
    Partial update.  Uniqueness is only re-checked for a value that differs
    from the one already stored, so re-sending a record unchanged never
    conflicts with itself.
    """
    student = _load(db, student_pk)
    patch = validate_payload(StudentUpdate, payload)
    changes = patch.model_dump(exclude_unset=True)

    changed_unique = {
        column: changes[column]
        for column in _UNIQUE_FIELDS
        if column in changes and changes[column] != getattr(student, column)
    }
    _check_unique(db, changed_unique, exclude_pk=student.id)

    for field, value in changes.items():
        setattr(student, field, value)
    student.updated_at = datetime.now(timezone.utc)

    detail = f"Updated student: {_describe(student)}"
    if changes:
        detail += " (" + ", ".join(sorted(changes)) + ")"
    audit.record(db, ctx, audit.UPDATE_STUDENT, detail)
    commit_or_conflict(db, _UNIQUE_FIELDS)
    db.refresh(student)
    return student


@service_operation("delete student")
def delete_student(db: Session, student_pk: int, ctx: CallerContext) -> None:
    if not ctx.is_admin:
        raise ForbiddenError("Forbidden: Admin access required")

    student = _load(db, student_pk)
    detail = f"Deleted student: {_describe(student)}"
    db.delete(student)
    audit.record(db, ctx, audit.DELETE_STUDENT, detail)
    db.commit()
