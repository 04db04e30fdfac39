# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Dashboard statistics over the students table.

Every figure is its own aggregate query; nothing is derived from another
figure in Python.

Note on ``by_department``: the grouping key is ``Student.program``, not
``Student.department``.  Existing dashboards read program names under the
``department`` label, so the behaviour is kept as is.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.errors import service_operation
from models.student import STATUSES, Student
from students.schemas import (
    DepartmentCount,
    GpaDistribution,
    RecentStudent,
    StatusCounts,
    StudentStatistics,
    YearCount,
)

RECENT_LIMIT = 5

# GPA bucket boundaries (lower bound inclusive)
EXCELLENT_GPA = 3.5
GOOD_GPA = 3.0
AVERAGE_GPA = 2.5


def _count(db: Session, *criteria) -> int:
    return db.query(func.count(Student.id)).filter(*criteria).scalar() or 0


@service_operation("compute statistics")
def compute(db: Session) -> StudentStatistics:
    total = _count(db)

    by_status = StatusCounts(**{s: _count(db, Student.status == s) for s in STATUSES})

    program_rows = (
        db.query(Student.program, func.count(Student.id))
        .group_by(Student.program)
        .order_by(Student.program)
        .all()
    )
    by_department = [
        DepartmentCount(department=program or "Unknown", count=count)
        for program, count in program_rows
    ]

    year_rows = (
        db.query(Student.year, func.count(Student.id))
        .group_by(Student.year)
        .order_by(Student.year)
        .all()
    )
    by_year = [YearCount(year=year, count=count) for year, count in year_rows]

    recent = (
        db.query(Student)
        .order_by(Student.created_at.desc(), Student.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    recent_students = [
        RecentStudent(
            id=s.id,
            student_id=s.student_id,
            first_name=s.first_name,
            last_name=s.last_name,
            email=s.email,
            program=s.program,
            department=s.program,
            status=s.status,
            created_at=s.created_at,
        )
        for s in recent
    ]

    avg = db.query(func.avg(Student.gpa)).filter(Student.gpa.isnot(None)).scalar()
    average_gpa = round(float(avg), 2) if avg is not None else None

    gpa_distribution = GpaDistribution(
        excellent=_count(db, Student.gpa >= EXCELLENT_GPA),
        good=_count(db, Student.gpa >= GOOD_GPA, Student.gpa < EXCELLENT_GPA),
        average=_count(db, Student.gpa >= AVERAGE_GPA, Student.gpa < GOOD_GPA),
        below_average=_count(db, Student.gpa < AVERAGE_GPA),
    )

    return StudentStatistics(
        total=total,
        by_status=by_status,
        by_department=by_department,
        by_year=by_year,
        recent_students=recent_students,
        average_gpa=average_gpa,
        gpa_distribution=gpa_distribution,
    )
