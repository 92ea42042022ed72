from __future__ import annotations
from datetime import date
from sqlalchemy import Boolean, Date, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base

class ShiftException(Base):
    __tablename__ = "shift_exceptions"

    id: Mapped[int] = mapped_column(primary_key=True)
    shift_id: Mapped[int] = mapped_column(
        ForeignKey("shifts.id", ondelete="CASCADE"), index=True
    )
    occurrence_date: Mapped[date] = mapped_column(Date(), nullable=False)
    is_cancelled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notes: Mapped[str | None] = mapped_column(Text(), nullable=True)

    # relationships
    shift = relationship("Shift", back_populates="exceptions")

    __table_args__ = (
        UniqueConstraint("shift_id", "occurrence_date", name="uq_shift_exception_date"),
    )
