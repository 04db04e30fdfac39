# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""Student ORM model."""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base

GENDERS = ("male", "female", "other")
STATUSES = ("active", "graduated", "suspended", "withdrawn")


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String(32), unique=True, nullable=False, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(32), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(Enum(*GENDERS, name="student_gender"), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    department = Column(String(100), nullable=True)
    program = Column(String(100), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    semester = Column(Integer, nullable=True)
    enrollment_date = Column(Date, nullable=True)
    # 0.00 - 4.00, two decimals
    gpa = Column(Numeric(3, 2, asdecimal=False), nullable=True)
    status = Column(
        Enum(*STATUSES, name="student_status"),
        nullable=False,
        default="active",
        index=True,
    )
    notes = Column(Text, nullable=True)
    # Weak reference: deleting the creating user nulls this column, the
    # student row itself is kept.
    created_by_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    created_by = relationship("User", lazy="joined")
