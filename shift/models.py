from __future__ import annotations
from typing import TYPE_CHECKING
from datetime import datetime
from sqlalchemy import Boolean, DateTime, Integer, String, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base

if TYPE_CHECKING:
    from station.models import WorkStation
    from worker.models import Worker

class Shift(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    station_id: Mapped[int] = mapped_column(
        ForeignKey("work_stations.id", ondelete="CASCADE"), index=True
    )
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("workers.id", ondelete="SET NULL"), index=True, nullable=True
    )

    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    notes: Mapped[str | None] = mapped_column(Text(), nullable=True)

    # recurrence (rule and end are NULL for one-time shifts)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurrence_rule: Mapped[str | None] = mapped_column(String(512), nullable=True)
    recurrence_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    is_cancelled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # relationships
    station: Mapped["WorkStation"] = relationship("WorkStation", back_populates="shifts", lazy="joined", innerjoin=True)
    creator: Mapped["Worker | None"] = relationship("Worker")
    exceptions = relationship("ShiftException", back_populates="shift", cascade="all, delete-orphan", passive_deletes=True)
    signups = relationship("ShiftSignup", back_populates="shift", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_shifts_capacity_positive"),
        CheckConstraint("end_at > start_at", name="ck_shifts_end_after_start"),
    )

Index("ix_shifts_station_start", Shift.station_id, Shift.start_at)
Index("ix_shifts_recurring_start", Shift.is_recurring, Shift.start_at)
