"""Initial schema: stations, workers, shifts, exceptions, signups

Revision ID: 4c2e9a1b7d30
Revises:
Create Date: 2026-10-17 10:12:41.203518
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "4c2e9a1b7d30"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATION_ENUM = "station_status"
WORKER_ENUM = "worker_role"
SIGNUP_ENUM = "signup_status"


def upgrade() -> None:
    # --- work_stations ---
    op.create_table(
        "work_stations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column(
            "status",
            sa.Enum("ACTIVE", "MAINTENANCE", "OFFLINE", name=STATION_ENUM),
            nullable=False,
            server_default="ACTIVE",
        ),
        sa.Column("required_skills", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_work_stations_category"), "work_stations", ["category"], unique=False)

    # --- workers ---
    op.create_table(
        "workers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column(
            "role",
            sa.Enum("ADMIN", "SUPERVISOR", "WORKER", name=WORKER_ENUM),
            nullable=False,
            server_default="WORKER",
        ),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    # --- shifts ---
    op.create_table(
        "shifts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("station_id", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("recurrence_rule", sa.String(length=512), nullable=True),
        sa.Column("recurrence_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_cancelled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.CheckConstraint("capacity >= 1", name="ck_shifts_capacity_positive"),
        sa.CheckConstraint("end_at > start_at", name="ck_shifts_end_after_start"),
        sa.ForeignKeyConstraint(["station_id"], ["work_stations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["workers.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shifts_station_id"), "shifts", ["station_id"], unique=False)
    op.create_index(op.f("ix_shifts_created_by"), "shifts", ["created_by"], unique=False)
    op.create_index("ix_shifts_station_start", "shifts", ["station_id", "start_at"], unique=False)
    op.create_index("ix_shifts_recurring_start", "shifts", ["is_recurring", "start_at"], unique=False)

    # --- shift_exceptions ---
    op.create_table(
        "shift_exceptions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shift_id", sa.Integer(), nullable=False),
        sa.Column("occurrence_date", sa.Date(), nullable=False),
        sa.Column("is_cancelled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["shift_id"], ["shifts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("shift_id", "occurrence_date", name="uq_shift_exception_date"),
    )
    op.create_index(op.f("ix_shift_exceptions_shift_id"), "shift_exceptions", ["shift_id"], unique=False)

    # --- shift_signups ---
    op.create_table(
        "shift_signups",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shift_id", sa.Integer(), nullable=False),
        sa.Column("worker_id", sa.Integer(), nullable=False),
        sa.Column("occurrence_date", sa.Date(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("CONFIRMED", "CANCELLED", "NO_SHOW", name=SIGNUP_ENUM),
            nullable=False,
            server_default="CONFIRMED",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["shift_id"], ["shifts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["worker_id"], ["workers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shift_signups_shift_id"), "shift_signups", ["shift_id"], unique=False)
    op.create_index(op.f("ix_shift_signups_worker_id"), "shift_signups", ["worker_id"], unique=False)
    op.create_index(
        "ix_signups_shift_occurrence_status",
        "shift_signups",
        ["shift_id", "occurrence_date", "status"],
        unique=False,
    )
    # partial unique: only live claims collide
    op.create_index(
        "uq_signup_confirmed",
        "shift_signups",
        ["shift_id", "occurrence_date", "worker_id"],
        unique=True,
        sqlite_where=sa.text("status = 'CONFIRMED'"),
        postgresql_where=sa.text("status = 'CONFIRMED'"),
    )


def downgrade() -> None:
    op.drop_index("uq_signup_confirmed", table_name="shift_signups")
    op.drop_index("ix_signups_shift_occurrence_status", table_name="shift_signups")
    op.drop_index(op.f("ix_shift_signups_worker_id"), table_name="shift_signups")
    op.drop_index(op.f("ix_shift_signups_shift_id"), table_name="shift_signups")
    op.drop_table("shift_signups")

    op.drop_index(op.f("ix_shift_exceptions_shift_id"), table_name="shift_exceptions")
    op.drop_table("shift_exceptions")

    op.drop_index("ix_shifts_recurring_start", table_name="shifts")
    op.drop_index("ix_shifts_station_start", table_name="shifts")
    op.drop_index(op.f("ix_shifts_created_by"), table_name="shifts")
    op.drop_index(op.f("ix_shifts_station_id"), table_name="shifts")
    op.drop_table("shifts")

    op.drop_table("workers")

    op.drop_index(op.f("ix_work_stations_category"), table_name="work_stations")
    op.drop_table("work_stations")

    bind = op.get_bind()
    for name in (SIGNUP_ENUM, WORKER_ENUM, STATION_ENUM):
        sa.Enum(name=name).drop(bind, checkfirst=True)
