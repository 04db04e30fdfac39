# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Pydantic request / response models for the student endpoints.

``StudentCreate`` requires the identifying and academic fields;
``StudentUpdate`` accepts any subset of them (partial update) but refuses an
explicit ``null`` for a column that cannot be empty.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, StringConstraints, field_validator

from core.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Pagination
from core.validators import blank_to_none

Gender = Literal["male", "female", "other"]
Status = Literal["active", "graduated", "suspended", "withdrawn"]

StudentCode = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=32)]
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Program = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
ShortText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, max_length=32)]
Address = Annotated[str, StringConstraints(strip_whitespace=True, max_length=255)]
PostalCode = Annotated[str, StringConstraints(strip_whitespace=True, max_length=20)]
Notes = Annotated[str, StringConstraints(max_length=2000)]
Gpa = Annotated[float, Field(ge=0.0, le=4.0)]
Year = Annotated[int, Field(ge=1, le=5)]
Semester = Annotated[int, Field(ge=1, le=2)]

_OPTIONAL_FIELDS = (
    "phone",
    "date_of_birth",
    "gender",
    "address",
    "city",
    "country",
    "postal_code",
    "department",
    "semester",
    "enrollment_date",
    "gpa",
    "notes",
)
_REQUIRED_FIELDS = ("student_id", "first_name", "last_name", "email", "program", "year", "status")


def _date_only(v):
    """Accept ``2000-05-15`` as well as ``2000-05-15T00:00:00.000Z``."""
    if isinstance(v, str) and "T" in v:
        return v.split("T", 1)[0]
    if isinstance(v, datetime):
        return v.date()
    return v


# -- Requests --------------------------------------------------------------


class StudentCreate(BaseModel):
    student_id: StudentCode
    first_name: PersonName
    last_name: PersonName
    email: EmailStr
    phone: Optional[Phone] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[Address] = None
    city: Optional[ShortText] = None
    country: Optional[ShortText] = None
    postal_code: Optional[PostalCode] = None
    department: Optional[ShortText] = None
    program: Program
    year: Year
    semester: Optional[Semester] = None
    enrollment_date: Optional[date] = None
    gpa: Optional[Gpa] = None
    status: Status = "active"
    notes: Optional[Notes] = None

    @field_validator(*_OPTIONAL_FIELDS, mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @field_validator("date_of_birth", "enrollment_date", mode="before")
    @classmethod
    def _dates(cls, v):
        return _date_only(v)

    @field_validator("date_of_birth")
    @classmethod
    def _born_in_past(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and v >= date.today():
            raise ValueError("Date of birth must be in the past")
        return v


class StudentUpdate(BaseModel):
    student_id: Optional[StudentCode] = None
    first_name: Optional[PersonName] = None
    last_name: Optional[PersonName] = None
    email: Optional[EmailStr] = None
    phone: Optional[Phone] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[Address] = None
    city: Optional[ShortText] = None
    country: Optional[ShortText] = None
    postal_code: Optional[PostalCode] = None
    department: Optional[ShortText] = None
    program: Optional[Program] = None
    year: Optional[Year] = None
    semester: Optional[Semester] = None
    enrollment_date: Optional[date] = None
    gpa: Optional[Gpa] = None
    status: Optional[Status] = None
    notes: Optional[Notes] = None

    @field_validator(*_OPTIONAL_FIELDS, mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @field_validator("date_of_birth", "enrollment_date", mode="before")
    @classmethod
    def _dates(cls, v):
        return _date_only(v)

    @field_validator("date_of_birth")
    @classmethod
    def _born_in_past(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and v >= date.today():
            raise ValueError("Date of birth must be in the past")
        return v

    @field_validator(*_REQUIRED_FIELDS)
    @classmethod
    def _not_null(cls, v):
        # only runs for keys present in the payload
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class StudentSortField(str, Enum):
    """Columns a listing may be ordered by.  Anything else is rejected."""

    created_at = "created_at"
    updated_at = "updated_at"
    student_id = "student_id"
    first_name = "first_name"
    last_name = "last_name"
    email = "email"
    program = "program"
    year = "year"
    gpa = "gpa"
    status = "status"


class StudentSearchParams(BaseModel):
    search: Optional[str] = Field(None, max_length=100)
    status: Optional[Status] = None
    program: Optional[str] = Field(None, max_length=100)
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    sort_by: StudentSortField = StudentSortField.created_at
    sort_order: Literal["asc", "desc"] = "desc"


# -- Responses -------------------------------------------------------------


class CreatorSummary(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str

    model_config = {"from_attributes": True}


class StudentOut(BaseModel):
    id: int
    student_id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    department: Optional[str] = None
    program: str
    year: int
    semester: Optional[int] = None
    enrollment_date: Optional[date] = None
    gpa: Optional[float] = None
    status: str
    notes: Optional[str] = None
    created_by_id: Optional[int] = None
    created_by: Optional[CreatorSummary] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class StudentListResponse(BaseModel):
    items: List[StudentOut]
    pagination: Pagination


# -- Statistics ------------------------------------------------------------


class StatusCounts(BaseModel):
    active: int
    graduated: int
    suspended: int
    withdrawn: int


class DepartmentCount(BaseModel):
    department: str
    count: int


class YearCount(BaseModel):
    year: int
    count: int


class RecentStudent(BaseModel):
    id: int
    student_id: str
    first_name: str
    last_name: str
    email: str
    program: str
    department: str  # mirrors program, see statistics.compute
    status: str
    created_at: datetime


class GpaDistribution(BaseModel):
    excellent: int
    good: int
    average: int
    below_average: int


class StudentStatistics(BaseModel):
    total: int
    by_status: StatusCounts
    by_department: List[DepartmentCount]
    by_year: List[YearCount]
    recent_students: List[RecentStudent]
    average_gpa: Optional[float] = None
    gpa_distribution: GpaDistribution
