from __future__ import annotations
from datetime import date, datetime
from enum import Enum
from sqlalchemy.sql import func
from sqlalchemy import Date, DateTime, ForeignKey, Index, Enum as SAEnum, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base

class SignupStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

class ShiftSignup(Base):
    __tablename__ = "shift_signups"

    id: Mapped[int] = mapped_column(primary_key=True)
    shift_id: Mapped[int] = mapped_column(
        ForeignKey("shifts.id", ondelete="CASCADE"), index=True
    )
    worker_id: Mapped[int] = mapped_column(
        ForeignKey("workers.id", ondelete="CASCADE"), index=True
    )
    # NULL for one-time shifts
    occurrence_date: Mapped[date | None] = mapped_column(Date(), nullable=True)

    status: Mapped[SignupStatus] = mapped_column(
        SAEnum(SignupStatus, name="signup_status"), nullable=False, default=SignupStatus.CONFIRMED
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # relationships
    shift = relationship("Shift", back_populates="signups")
    worker = relationship("Worker", back_populates="signups")

# one live claim per worker and occurrence; cancelled rows stay as history
Index(
    "uq_signup_confirmed",
    ShiftSignup.shift_id,
    ShiftSignup.occurrence_date,
    ShiftSignup.worker_id,
    unique=True,
    sqlite_where=text("status = 'CONFIRMED'"),
    postgresql_where=text("status = 'CONFIRMED'"),
)
Index("ix_signups_shift_occurrence_status", ShiftSignup.shift_id, ShiftSignup.occurrence_date, ShiftSignup.status)
