"""Initial schema – users, students and security_logs

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17

Creates the three tables with the foreign-key constraints, unique keys and
indexes required by the application.
"""

from alembic import op
import sqlalchemy as sa

# Alembic revision identifiers
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # -- users ----------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column(
            "role",
            sa.Enum("admin", "user", name="user_role"),
            nullable=False,
            server_default="user",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    # unique keys are named ix_<table>_<column>, the same names the ORM models
    # produce; conflict reporting matches on them
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # -- students -------------------------------------------------------
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("student_id", sa.String(32), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column(
            "gender",
            sa.Enum("male", "female", "other", name="student_gender"),
            nullable=True,
        ),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("program", sa.String(100), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=True),
        sa.Column("enrollment_date", sa.Date(), nullable=True),
        sa.Column("gpa", sa.Numeric(3, 2, asdecimal=False), nullable=True),
        sa.Column(
            "status",
            sa.Enum("active", "graduated", "suspended", "withdrawn", name="student_status"),
            nullable=False,
            server_default="active",
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        # Weak reference: removing the creator keeps the student row
        sa.Column(
            "created_by_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_students_student_id", "students", ["student_id"], unique=True)
    op.create_index("ix_students_email", "students", ["email"], unique=True)
    op.create_index("idx_students_program", "students", ["program"])
    op.create_index("idx_students_year", "students", ["year"])
    op.create_index("idx_students_status", "students", ["status"])
    op.create_index("idx_students_created_by_id", "students", ["created_by_id"])
    op.create_index("idx_students_created_at", "students", ["created_at"])

    # -- security_logs --------------------------------------------------
    op.create_table(
        "security_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("idx_security_logs_user_id", "security_logs", ["user_id"])
    op.create_index("idx_security_logs_action", "security_logs", ["action"])
    op.create_index("idx_security_logs_created_at", "security_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("security_logs")
    op.drop_table("students")
    op.drop_table("users")
