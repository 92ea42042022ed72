# shift/service.py
from __future__ import annotations
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session
from fastapi import HTTPException

from .models import Shift
from .schemas import ShiftCreate, ShiftUpdate, CalendarEventSchema
from recurrence.expander import expand_occurrences
from recurrence.rule import RecurrenceParseError, parse_rule
from shiftexception.models import ShiftException
from signup.models import ShiftSignup, SignupStatus
from station.models import WorkStation

logger = logging.getLogger(__name__)


def _aware(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc) if dt.tzinfo else dt.replace(tzinfo=timezone.utc)

def _validate_recurrence(is_recurring: bool, rule: Optional[str]) -> None:
    if not is_recurring:
        return
    if not rule:
        raise HTTPException(status_code=422, detail="recurrence_rule is required for recurring shifts")
    try:
        parse_rule(rule)
    except RecurrenceParseError as exc:
        raise HTTPException(status_code=422, detail=f"invalid recurrence_rule: {exc}")


def get_shift(db: Session, shift_id: int) -> Shift | None:
    return db.get(Shift, shift_id)

def get_shifts(
    db: Session,
    *,
    station_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    notes: Optional[str] = None,
    include_recurring: bool = False,
) -> list[Shift]:
    stmt = select(Shift)
    if not include_recurring:
        stmt = stmt.where(Shift.is_recurring.is_(False))
    if station_id is not None:
        stmt = stmt.where(Shift.station_id == station_id)
    if start is not None:
        stmt = stmt.where(Shift.end_at > _aware(start))    # overlaps window
    if end is not None:
        stmt = stmt.where(Shift.start_at < _aware(end))    # overlaps window
    if notes:
        stmt = stmt.where(Shift.notes.ilike(f"%{notes}%"))
    stmt = stmt.order_by(Shift.start_at, Shift.id)
    return list(db.scalars(stmt))

def create_shift(db: Session, shift: ShiftCreate) -> Shift:
    if shift.start_at >= shift.end_at:
        raise HTTPException(status_code=422, detail="start_at must be before end_at")
    if shift.capacity < 1:
        raise HTTPException(status_code=422, detail="capacity must be >= 1")
    _validate_recurrence(shift.is_recurring, shift.recurrence_rule)

    if not db.get(WorkStation, shift.station_id):
        raise HTTPException(status_code=404, detail="station not found")

    row = Shift(
        title=shift.title,
        station_id=shift.station_id,
        start_at=_aware(shift.start_at),
        end_at=_aware(shift.end_at),
        capacity=shift.capacity,
        notes=shift.notes,
        is_recurring=shift.is_recurring,
        # one-time shifts never carry recurrence fields
        recurrence_rule=shift.recurrence_rule if shift.is_recurring else None,
        recurrence_end=_aware(shift.recurrence_end) if shift.is_recurring and shift.recurrence_end else None,
        created_by=shift.created_by,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Created %s shift %s (%s)", "recurring" if row.is_recurring else "one-time", row.id, row.title)
    return row

def update_shift(db: Session, shift_id: int, patch: ShiftUpdate) -> Shift:
    row = db.get(Shift, shift_id)
    if not row:
        raise HTTPException(status_code=404, detail="Shift not found")

    data = patch.model_dump(exclude_unset=True)

    new_start = data.get("start_at", row.start_at)
    new_end   = data.get("end_at",   row.end_at)
    if new_start is not None and new_end is not None and _aware(new_start) >= _aware(new_end):
        raise HTTPException(status_code=422, detail="start_at must be before end_at")

    if "capacity" in data and data["capacity"] is not None and data["capacity"] < 1:
        raise HTTPException(status_code=422, detail="capacity must be >= 1")

    is_recurring = data.get("is_recurring")
    if is_recurring is None:
        is_recurring = row.is_recurring
    rule = data.get("recurrence_rule", row.recurrence_rule)
    _validate_recurrence(is_recurring, rule)

    if "station_id" in data and not db.get(WorkStation, data["station_id"]):
        raise HTTPException(status_code=404, detail="station not found")

    for k, v in data.items():
        if v is None and k in ("title", "station_id", "start_at", "end_at", "capacity", "is_cancelled", "is_recurring"):
            continue
        if isinstance(v, datetime):
            v = _aware(v)
        setattr(row, k, v)
    if not is_recurring:
        row.recurrence_rule = None
        row.recurrence_end = None

    db.commit()
    db.refresh(row)
    return row

def delete_shift(db: Session, shift_id: int) -> None:
    row = db.get(Shift, shift_id)
    if row:
        db.delete(row)
        db.commit()


# ---------- calendar ----------

def _exceptions_by_shift(db: Session, shift_ids: list[int], start: datetime, end: datetime) -> dict[int, list[ShiftException]]:
    out: dict[int, list[ShiftException]] = defaultdict(list)
    if not shift_ids:
        return out
    stmt = select(ShiftException).where(
        ShiftException.shift_id.in_(shift_ids),
        ShiftException.occurrence_date >= start.date(),
        ShiftException.occurrence_date <= end.date(),
    )
    for exc in db.scalars(stmt):
        out[exc.shift_id].append(exc)
    return out

def confirmed_counts(db: Session, shift_ids: list[int]) -> dict[tuple, int]:
    """CONFIRMED signups keyed by (shift_id, occurrence_date)."""
    if not shift_ids:
        return {}
    stmt = (
        select(ShiftSignup.shift_id, ShiftSignup.occurrence_date, func.count(ShiftSignup.id))
        .where(
            ShiftSignup.shift_id.in_(shift_ids),
            ShiftSignup.status == SignupStatus.CONFIRMED,
        )
        .group_by(ShiftSignup.shift_id, ShiftSignup.occurrence_date)
    )
    return {(sid, occ_date): n for sid, occ_date, n in db.execute(stmt)}

def get_calendar_events(
    db: Session,
    *,
    start: datetime,
    end: datetime,
    station_id: Optional[int] = None,
    category: Optional[str] = None,
) -> list[CalendarEventSchema]:
    """
    Every shift occurrence in [start, end]: one-time shifts that overlap the
    window plus the expanded occurrences of recurring shifts, minus dates
    cancelled through exceptions.
    """
    start, end = _aware(start), _aware(end)
    if end < start:
        raise HTTPException(status_code=422, detail="end must be on or after start")

    base = select(Shift)
    if station_id is not None:
        base = base.where(Shift.station_id == station_id)
    if category is not None:
        base = base.join(WorkStation, WorkStation.id == Shift.station_id).where(WorkStation.category == category)

    one_time = list(db.scalars(
        base.where(
            Shift.is_recurring.is_(False),
            Shift.start_at <= end,
            Shift.end_at > start,
        )
    ).unique())
    recurring = list(db.scalars(
        base.where(
            Shift.is_recurring.is_(True),
            Shift.start_at <= end,
            or_(Shift.recurrence_end.is_(None), Shift.recurrence_end >= start),
        )
    ).unique())

    exceptions = _exceptions_by_shift(db, [s.id for s in recurring], start, end)
    counts = confirmed_counts(db, [s.id for s in one_time + recurring])

    events: list[CalendarEventSchema] = []
    for shift in one_time + recurring:
        for occ in expand_occurrences(shift, exceptions.get(shift.id, ()), start, end):
            events.append(CalendarEventSchema(
                id=occ.id,
                shift_id=shift.id,
                title=shift.title,
                station_id=shift.station_id,
                station_name=shift.station.name if shift.station else None,
                start_at=occ.start_at,
                end_at=occ.end_at,
                capacity=shift.capacity,
                notes=shift.notes,
                is_recurring=shift.is_recurring,
                is_cancelled=shift.is_cancelled,
                occurrence_date=occ.occurrence_date,
                confirmed_count=counts.get((shift.id, occ.occurrence_date), 0),
            ))

    events.sort(key=lambda e: (e.start_at, e.shift_id))
    return events
