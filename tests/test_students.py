# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------

from datetime import date, datetime, timedelta

from sqlalchemy import Numeric

from conftest import insert_students
from models.security_log import SecurityLog
from models.student import Student


def _create(client, headers, payload):
    resp = client.post("/students", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# create / get
# ---------------------------------------------------------------------------


def test_create_then_get_returns_same_record(client, regular_user, user_headers, student_payload):
    created = _create(client, user_headers, student_payload())
    assert created["status"] == "active"
    assert created["created_by_id"] == regular_user.id
    assert created["created_by"]["email"] == regular_user.email

    fetched = client.get(f"/students/{created['id']}", headers=user_headers).json()
    for field, value in student_payload().items():
        assert fetched[field] == value


def test_create_requires_session(client, student_payload):
    resp = client.post("/students", json=student_payload())
    assert resp.status_code == 401
    assert resp.json()["kind"] == "unauthorized"


def test_create_records_audit_entry(client, db, regular_user, user_headers, student_payload):
    _create(client, user_headers, student_payload())
    log = db.query(SecurityLog).filter(SecurityLog.action == "CREATE_STUDENT").one()
    assert log.user_id == regular_user.id
    assert log.details == "Created student: Ahmed Benali (ESISA-2024-001)"


def test_create_duplicate_student_id(client, user_headers, student_payload):
    _create(client, user_headers, student_payload())
    resp = client.post(
        "/students",
        json=student_payload(email="someone.else@student.esisa.ac.ma"),
        headers=user_headers,
    )
    assert resp.status_code == 409
    assert resp.json()["kind"] == "conflict"
    assert resp.json()["field"] == "student_id"


def test_create_duplicate_email(client, user_headers, student_payload):
    _create(client, user_headers, student_payload())
    resp = client.post("/students", json=student_payload(student_id="ESISA-2024-999"), headers=user_headers)
    assert resp.status_code == 409
    assert resp.json()["field"] == "email"


def test_create_reports_every_failing_field(client, user_headers):
    resp = client.post(
        "/students",
        json={"student_id": "x", "email": "bad", "year": 9, "gpa": 5},
        headers=user_headers,
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["kind"] == "validation_error"
    assert {"student_id", "first_name", "last_name", "email", "program", "year", "gpa"} <= set(body["details"])


def test_create_rejects_future_birth_date(client, user_headers, student_payload):
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    resp = client.post("/students", json=student_payload(date_of_birth=tomorrow), headers=user_headers)
    assert resp.status_code == 400
    assert resp.json()["details"]["date_of_birth"] == "Date of birth must be in the past"


def test_create_accepts_datetime_birth_date_and_blank_optionals(client, user_headers, student_payload):
    created = _create(
        client,
        user_headers,
        student_payload(date_of_birth="2000-05-15T00:00:00.000Z", phone="", notes=""),
    )
    assert created["date_of_birth"] == "2000-05-15"
    assert created["phone"] is None
    assert created["notes"] is None


def test_create_rejects_unknown_status(client, user_headers, student_payload):
    resp = client.post("/students", json=student_payload(status="expelled"), headers=user_headers)
    assert resp.status_code == 400
    assert "status" in resp.json()["details"]


def test_get_missing_student(client, user_headers):
    resp = client.get("/students/424242", headers=user_headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Student not found", "kind": "not_found"}


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


def test_empty_update_only_touches_updated_at(client, user_headers, student_payload):
    created = _create(client, user_headers, student_payload())
    resp = client.put(f"/students/{created['id']}", json={}, headers=user_headers)
    assert resp.status_code == 200
    updated = resp.json()

    for field in created:
        if field != "updated_at":
            assert updated[field] == created[field], field
    assert datetime.fromisoformat(updated["updated_at"]) >= datetime.fromisoformat(created["updated_at"])


def test_partial_update_changes_only_given_fields(client, db, user_headers, student_payload):
    created = _create(client, user_headers, student_payload())
    resp = client.put(
        f"/students/{created['id']}",
        json={"gpa": 3.9, "status": "graduated"},
        headers=user_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["gpa"] == 3.9
    assert body["status"] == "graduated"
    assert body["program"] == created["program"]

    log = db.query(SecurityLog).filter(SecurityLog.action == "UPDATE_STUDENT").one()
    assert log.details.endswith("(gpa, status)")


def test_update_resending_own_unique_values(client, user_headers, student_payload):
    created = _create(client, user_headers, student_payload())
    resp = client.put(
        f"/students/{created['id']}",
        json={"student_id": created["student_id"], "email": created["email"]},
        headers=user_headers,
    )
    assert resp.status_code == 200


def test_update_to_taken_email_conflicts(client, user_headers, student_payload):
    _create(client, user_headers, student_payload())
    second = _create(
        client,
        user_headers,
        student_payload(student_id="ESISA-2024-002", email="fatima.zahra@student.esisa.ac.ma"),
    )
    resp = client.put(
        f"/students/{second['id']}",
        json={"email": "ahmed.benali@student.esisa.ac.ma"},
        headers=user_headers,
    )
    assert resp.status_code == 409
    assert resp.json()["field"] == "email"


def test_update_rejects_null_for_required_field(client, user_headers, student_payload):
    created = _create(client, user_headers, student_payload())
    resp = client.put(f"/students/{created['id']}", json={"student_id": None, "year": 0}, headers=user_headers)
    assert resp.status_code == 400
    assert {"student_id", "year"} <= set(resp.json()["details"])


def test_update_clears_optional_field_with_null(client, user_headers, student_payload):
    created = _create(client, user_headers, student_payload())
    resp = client.put(f"/students/{created['id']}", json={"gpa": None}, headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["gpa"] is None


def test_update_missing_student(client, user_headers):
    resp = client.put("/students/424242", json={"gpa": 3.0}, headers=user_headers)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


def test_delete_is_admin_only(client, user_headers, student_payload):
    created = _create(client, user_headers, student_payload())
    resp = client.delete(f"/students/{created['id']}", headers=user_headers)
    assert resp.status_code == 403
    assert client.get(f"/students/{created['id']}", headers=user_headers).status_code == 200


def test_second_delete_is_not_found(client, db, admin_headers, student_payload):
    created = _create(client, admin_headers, student_payload())
    first = client.delete(f"/students/{created['id']}", headers=admin_headers)
    assert first.status_code == 200
    assert first.json() == {"detail": "Student deleted successfully"}

    second = client.delete(f"/students/{created['id']}", headers=admin_headers)
    assert second.status_code == 404
    assert db.query(SecurityLog).filter(SecurityLog.action == "DELETE_STUDENT").count() == 1


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


def test_list_pagination(client, db, user_headers):
    insert_students(db, 25)
    resp = client.get("/students", params={"page": 2, "limit": 10}, headers=user_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"] == {"page": 2, "limit": 10, "total": 25, "total_pages": 3}
    assert len(body["items"]) == 10


def test_list_last_partial_page(client, db, user_headers):
    insert_students(db, 25)
    body = client.get("/students", params={"page": 3, "limit": 10}, headers=user_headers).json()
    assert len(body["items"]) == 5


def test_list_defaults_newest_first(client, db, user_headers):
    insert_students(db, 3)
    body = client.get("/students", headers=user_headers).json()
    assert body["pagination"]["limit"] == 10
    assert [s["student_id"] for s in body["items"]] == ["STU-0002", "STU-0001", "STU-0000"]


def test_list_search_matches_any_identity_field(client, db, user_headers):
    insert_students(db, 12)
    by_name = client.get("/students", params={"search": "Last11"}, headers=user_headers).json()
    by_code = client.get("/students", params={"search": "STU-0003"}, headers=user_headers).json()
    assert [s["student_id"] for s in by_name["items"]] == ["STU-0011"]
    assert [s["student_id"] for s in by_code["items"]] == ["STU-0003"]


def test_list_search_treats_wildcards_literally(client, db, user_headers):
    insert_students(db, 3)
    db.add(Student(
        student_id="A_B-1",
        first_name="Under",
        last_name="Score",
        email="under_score@student.esisa.ac.ma",
        program="Computer Science",
        year=1,
        status="active",
    ))
    db.commit()

    underscore = client.get("/students", params={"search": "_"}, headers=user_headers).json()
    percent = client.get("/students", params={"search": "%"}, headers=user_headers).json()
    assert underscore["pagination"]["total"] == 1
    assert [s["student_id"] for s in underscore["items"]] == ["A_B-1"]
    assert percent["pagination"]["total"] == 0


def test_gpa_stored_with_two_decimals(client, user_headers, student_payload):
    gpa = Student.__table__.c.gpa.type
    assert isinstance(gpa, Numeric)
    assert (gpa.precision, gpa.scale) == (3, 2)

    created = _create(client, user_headers, student_payload(gpa=3.45))
    fetched = client.get(f"/students/{created['id']}", headers=user_headers).json()
    assert fetched["gpa"] == 3.45


def test_list_filters_are_anded(client, db, user_headers, student_payload):
    insert_students(db, 4)
    _create(client, user_headers, student_payload(status="graduated", program="Data Science"))
    _create(
        client,
        user_headers,
        student_payload(
            student_id="ESISA-2024-002",
            email="fatima.zahra@student.esisa.ac.ma",
            status="graduated",
        ),
    )

    resp = client.get(
        "/students",
        params={"status": "graduated", "program": "Data Science"},
        headers=user_headers,
    )
    assert [s["student_id"] for s in resp.json()["items"]] == ["ESISA-2024-001"]


def test_list_sort_by_gpa_ascending(client, db, user_headers):
    rows = insert_students(db, 3)
    for row, gpa in zip(rows, (3.1, 2.2, 3.9)):
        row.gpa = gpa
    db.commit()

    body = client.get("/students", params={"sort_by": "gpa", "sort_order": "asc"}, headers=user_headers).json()
    assert [s["gpa"] for s in body["items"]] == [2.2, 3.1, 3.9]


def test_list_rejects_unknown_sort_field(client, user_headers):
    resp = client.get("/students", params={"sort_by": "password_hash"}, headers=user_headers)
    assert resp.status_code == 400
    assert "sort_by" in resp.json()["details"]


def test_list_rejects_out_of_range_paging(client, user_headers):
    resp = client.get("/students", params={"page": 0, "limit": 1000}, headers=user_headers)
    assert resp.status_code == 400
    assert {"page", "limit"} <= set(resp.json()["details"])


def test_list_requires_session(client):
    assert client.get("/students").status_code == 401
