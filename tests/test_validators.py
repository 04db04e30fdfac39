# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------

import pytest
from sqlalchemy.exc import OperationalError

from core.errors import (
    ConflictError,
    InternalError,
    ValidationError,
    commit_or_conflict,
    conflicting_column,
    service_operation,
)
from core.pagination import paginate
from core.validators import blank_to_none, check_password_policy, format_errors, validate_payload
from models.student import Student
from students.schemas import StudentSearchParams


# ---------------------------------------------------------------------------
# password policy
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "password, fragment",
    [
        ("Sh0rt!", "at least 8"),
        ("lowercase1!", "uppercase"),
        ("UPPERCASE1!", "lowercase"),
        ("NoDigits!!", "digit"),
        ("NoSymbol12", "symbol"),
    ],
)
def test_password_policy_failures(password, fragment):
    with pytest.raises(ValueError, match=fragment):
        check_password_policy(password)


def test_password_policy_accepts_strong_password():
    assert check_password_policy("G00d-Pass") == "G00d-Pass"


def test_blank_to_none():
    assert blank_to_none("   ") is None
    assert blank_to_none("x") == "x"
    assert blank_to_none(0) == 0


# ---------------------------------------------------------------------------
# error formatting
# ---------------------------------------------------------------------------


def test_format_errors_strips_location_and_joins_messages():
    details = format_errors([
        {"loc": ("body", "email"), "msg": "value is not a valid email address"},
        {"loc": ("query", "page"), "msg": "Input should be greater than or equal to 1"},
        {"loc": ("body", "password"), "msg": "Value error, Password too weak"},
        {"loc": ("body", "password"), "msg": "second problem"},
        {"loc": (), "msg": "Field required"},
    ])
    assert details == {
        "email": "value is not a valid email address",
        "page": "Input should be greater than or equal to 1",
        "password": "Password too weak; second problem",
        "__all__": "Field required",
    }


def test_validate_payload_rejects_non_object():
    with pytest.raises(ValidationError) as exc_info:
        validate_payload(StudentSearchParams, ["page", 1])
    assert exc_info.value.details == {"__all__": "Expected a JSON object"}


def test_validate_payload_treats_none_as_empty():
    params = validate_payload(StudentSearchParams, None)
    assert params.page == 1
    assert params.sort_by.value == "created_at"


def test_validation_error_body():
    err = ValidationError({"year": "bad"})
    assert err.status_code == 400
    assert err.to_dict() == {"error": "Validation failed", "kind": "validation_error", "details": {"year": "bad"}}


# ---------------------------------------------------------------------------
# service plumbing
# ---------------------------------------------------------------------------


def test_service_operation_hides_database_errors():
    class _Session:
        rolled_back = False

        def rollback(self):
            self.rolled_back = True

    @service_operation("broken")
    def broken(db):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    session = _Session()
    with pytest.raises(InternalError) as exc_info:
        broken(session)
    assert session.rolled_back
    assert exc_info.value.to_dict() == {"error": "Internal server error", "kind": "internal"}


def test_service_operation_passes_app_errors_through():
    @service_operation("conflicting")
    def conflicting(db):
        raise ConflictError("taken", field="email")

    with pytest.raises(ConflictError):
        conflicting(object())


def test_commit_or_conflict_names_the_column(db):
    db.add(Student(student_id="DUP-1", first_name="A", last_name="B", email="a@student.esisa.ac.ma",
                   program="CS", year=1, status="active"))
    db.commit()
    db.add(Student(student_id="DUP-1", first_name="C", last_name="D", email="c@student.esisa.ac.ma",
                   program="CS", year=1, status="active"))

    with pytest.raises(ConflictError) as exc_info:
        commit_or_conflict(db, {"student_id": "Student ID already exists", "email": "Email already exists"})
    assert exc_info.value.field == "student_id"
    assert exc_info.value.to_dict()["error"] == "Student ID already exists"


def test_conflicting_column_reads_the_key_not_the_value():
    columns = ["student_id", "email"]
    mysql = "(1062, \"Duplicate entry 'student_id@esisa.ac.ma' for key 'students.ix_students_email'\")"
    postgres = 'duplicate key value violates unique constraint "ix_students_student_id"'
    sqlite = "UNIQUE constraint failed: students.email"

    assert conflicting_column(mysql, columns) == "email"
    assert conflicting_column(postgres, columns) == "student_id"
    assert conflicting_column(sqlite, columns) == "email"
    assert conflicting_column("NOT NULL constraint failed: students.email", columns) is None


def test_paginate_empty_query(db):
    rows, page = paginate(db.query(Student).order_by(Student.id), 1, 10)
    assert rows == []
    assert page.total == 0
    assert page.total_pages == 0
