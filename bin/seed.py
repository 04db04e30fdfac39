# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first admin user and a set of sample students.

Run once after the initial migration:
    python bin/seed.py

The admin account is read from FIRST_ADMIN_EMAIL / FIRST_ADMIN_PASSWORD in
etc/app.conf.  Students are matched on email, so re-running the script is a
no-op for rows that already exist.
"""

import sys
import os
from datetime import date

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/seed.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from core.config import settings          # noqa: E402
from core.security import hash_password   # noqa: E402
from database import SessionLocal         # noqa: E402
from models.student import Student        # noqa: E402
from models.user import User              # noqa: E402

# (student_id, first, last, email local part, dob, gender, city, postal, program, year, gpa, status, notes)
SAMPLE_STUDENTS = [
    ("ESISA-2024-001", "Ahmed", "Benali", "ahmed.benali", date(2000, 5, 15), "male",
     "Fès", "30000", "Computer Science", 3, 3.7, "active", "Excellent student, dean's list"),
    ("ESISA-2024-002", "Fatima", "Zahra", "fatima.zahra", date(2001, 3, 22), "female",
     "Casablanca", "20000", "Software Engineering", 2, 3.9, "active", "Top performer in programming courses"),
    ("ESISA-2024-003", "Omar", "Khattabi", "omar.khattabi", date(1999, 11, 8), "male",
     "Rabat", "10000", "Data Science", 4, 3.5, "active", "Working on AI research project"),
    ("ESISA-2024-004", "Sara", "El Amrani", "sara.elamrani", date(2002, 7, 30), "female",
     "Marrakech", "40000", "Computer Science", 1, 3.2, "active", "New student, showing great potential"),
    ("ESISA-2024-005", "Youssef", "Mansouri", "youssef.mansouri", date(2000, 1, 12), "male",
     "Tangier", "90000", "Cybersecurity", 3, 3.8, "active", "Certified ethical hacker"),
    ("ESISA-2023-010", "Khadija", "Bennani", "khadija.bennani", date(1998, 9, 5), "female",
     "Fès", "30000", "Software Engineering", 5, 3.95, "graduated", "Valedictorian of Class 2023"),
    ("ESISA-2024-006", "Mehdi", "Tazi", "mehdi.tazi", date(2001, 12, 18), "male",
     "Meknes", "50000", "Data Science", 2, 3.4, "active", "Passionate about machine learning"),
    ("ESISA-2024-007", "Imane", "Fassi", "imane.fassi", date(2000, 4, 25), "female",
     "Casablanca", "20100", "Computer Science", 3, 3.6, "active", "Full-stack development focus"),
    ("ESISA-2022-015", "Amine", "Chraibi", "amine.chraibi", date(1999, 6, 14), "male",
     "Agadir", "80000", "Cybersecurity", 4, 2.8, "suspended", "Academic probation - attendance issues"),
    ("ESISA-2024-008", "Nadia", "Alaoui", "nadia.alaoui", date(2002, 2, 28), "female",
     "Oujda", "60000", "Software Engineering", 1, 3.3, "active", "Transfer student"),
]


def seed_admin(db):
    if not settings.first_admin_email or not settings.first_admin_password:
        print("[seed] FIRST_ADMIN_EMAIL or FIRST_ADMIN_PASSWORD not set in etc/app.conf – skipping admin.")
        return None

    existing = db.query(User).filter(User.email == settings.first_admin_email).first()
    if existing:
        print(f"[seed] Admin '{settings.first_admin_email}' already exists – skipping.")
        return existing

    admin = User(
        email=settings.first_admin_email,
        password_hash=hash_password(settings.first_admin_password),
        first_name=settings.first_admin_first_name,
        last_name=settings.first_admin_last_name,
        role="admin",
        is_active=True,
    )
    db.add(admin)
    db.commit()
    print(f"[seed] Admin '{settings.first_admin_email}' created successfully.")
    return admin


def seed_students(db, creator):
    created = 0
    for (sid, first, last, local, dob, gender, city, postal, program, year, gpa, status, notes) in SAMPLE_STUDENTS:
        email = f"{local}@student.esisa.ac.ma"
        if db.query(Student).filter(Student.email == email).first():
            continue
        db.add(Student(
            student_id=sid,
            first_name=first,
            last_name=last,
            email=email,
            date_of_birth=dob,
            gender=gender,
            city=city,
            country="Morocco",
            postal_code=postal,
            program=program,
            year=year,
            gpa=gpa,
            status=status,
            notes=notes,
            created_by_id=creator.id if creator else None,
        ))
        created += 1
    db.commit()
    print(f"[seed] {created} sample student(s) inserted.")


def seed():
    db = SessionLocal()
    try:
        admin = seed_admin(db)
        seed_students(db, admin)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
