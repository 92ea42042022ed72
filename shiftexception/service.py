from __future__ import annotations
import logging
from datetime import date
from typing import Optional, List

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import ShiftException
from .schema import ShiftExceptionCreate
from shift.models import Shift
from recurrence.expander import occurrence_on

logger = logging.getLogger(__name__)


def get_exceptions(
    db: Session,
    *,
    shift_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[ShiftException]:
    stmt = select(ShiftException).where(ShiftException.shift_id == shift_id)
    if start_date is not None:
        stmt = stmt.where(ShiftException.occurrence_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(ShiftException.occurrence_date <= end_date)
    stmt = stmt.order_by(ShiftException.occurrence_date)
    return list(db.scalars(stmt))


def get_exception_for_date(db: Session, shift_id: int, occurrence_date: date) -> ShiftException | None:
    stmt = select(ShiftException).where(
        ShiftException.shift_id == shift_id,
        ShiftException.occurrence_date == occurrence_date,
    )
    return db.scalars(stmt).first()


def create_exception(db: Session, dto: ShiftExceptionCreate) -> ShiftException:
    shift = db.get(Shift, dto.shift_id)
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")
    if not shift.is_recurring:
        raise HTTPException(status_code=422, detail="exceptions only apply to recurring shifts")
    if occurrence_on(shift, dto.occurrence_date) is None:
        raise HTTPException(status_code=422, detail="shift has no occurrence on that date")

    row = ShiftException(
        shift_id=dto.shift_id,
        occurrence_date=dto.occurrence_date,
        is_cancelled=dto.is_cancelled,
        notes=dto.notes,
    )
    db.add(row)
    # Let IntegrityError bubble; router maps to 409 on duplicate date
    db.commit()
    db.refresh(row)
    logger.info("Shift %s occurrence %s marked cancelled=%s", row.shift_id, row.occurrence_date, row.is_cancelled)
    return row


def delete_exception(db: Session, shift_id: int, exception_id: int) -> bool:
    row = db.get(ShiftException, exception_id)
    if not row or row.shift_id != shift_id:
        return False
    db.delete(row)
    db.commit()
    return True
