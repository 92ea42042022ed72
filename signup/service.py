from __future__ import annotations
import logging
from datetime import date, datetime
from typing import Optional, List

from fastapi import HTTPException
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from .models import ShiftSignup, SignupStatus
from .schema import SignupCreate, MySignupSchema, ConflictSchema, RejectionSchema
from .eligibility import (
    BookedSlot,
    RejectionReason,
    SignupCandidate,
    Verdict,
    evaluate_signup,
)
from recurrence.expander import Occurrence, occurrence_at, occurrence_on
from shift.models import Shift
from shift.schemas import AvailableShiftSchema
from shift import service as shift_service
from shiftexception.service import get_exception_for_date
from station.models import WorkStation
from worker.models import Worker

logger = logging.getLogger(__name__)


class SignupRejected(HTTPException):
    """An evaluator rejection, rendered as a 409 with a structured body."""

    def __init__(self, verdict: Verdict):
        body = RejectionSchema(
            reason=verdict.reason.value,
            message=verdict.message,
            conflicts=[
                ConflictSchema(
                    shift_id=c.shift_id,
                    title=c.title,
                    occurrence_date=c.occurrence_date,
                    start_at=c.start_at,
                    end_at=c.end_at,
                )
                for c in verdict.conflicts
            ],
            missing_skills=sorted(verdict.missing_skills),
        )
        super().__init__(status_code=409, detail=body.model_dump(mode="json"))
        self.verdict = verdict


# ---------- queries ----------

def _occurrence_filter(occurrence_date: Optional[date]):
    if occurrence_date is None:
        return ShiftSignup.occurrence_date.is_(None)
    return ShiftSignup.occurrence_date == occurrence_date

def get_signups(
    db: Session,
    *,
    shift_id: int,
    occurrence_date: Optional[date] = None,
    status: SignupStatus = SignupStatus.CONFIRMED,
) -> List[ShiftSignup]:
    stmt = select(ShiftSignup).where(
        ShiftSignup.shift_id == shift_id,
        ShiftSignup.status == status,
    )
    if occurrence_date is not None:
        stmt = stmt.where(ShiftSignup.occurrence_date == occurrence_date)
    stmt = stmt.order_by(ShiftSignup.created_at, ShiftSignup.id)
    return list(db.scalars(stmt))

def count_confirmed(db: Session, shift_id: int, occurrence_date: Optional[date]) -> int:
    stmt = select(func.count(ShiftSignup.id)).where(
        ShiftSignup.shift_id == shift_id,
        ShiftSignup.status == SignupStatus.CONFIRMED,
        _occurrence_filter(occurrence_date),
    )
    return db.scalar(stmt) or 0

def get_booked_slots(db: Session, worker_id: int) -> List[BookedSlot]:
    """The worker's CONFIRMED signups at their effective start/end."""
    rows = db.execute(
        select(ShiftSignup, Shift)
        .join(Shift, Shift.id == ShiftSignup.shift_id)
        .where(
            ShiftSignup.worker_id == worker_id,
            ShiftSignup.status == SignupStatus.CONFIRMED,
        )
    ).unique().all()

    slots = []
    for signup, shift in rows:
        occ = occurrence_at(shift, signup.occurrence_date)
        slots.append(BookedSlot(
            shift_id=shift.id,
            occurrence_date=signup.occurrence_date,
            start_at=occ.start_at,
            end_at=occ.end_at,
            title=shift.title,
        ))
    return slots

def resolve_occurrence(shift: Shift, occurrence_date: Optional[date]) -> Occurrence:
    """The concrete occurrence a signup request points at, or 404/422."""
    if not shift.is_recurring:
        return occurrence_at(shift, None)
    if occurrence_date is None:
        raise HTTPException(status_code=422, detail="occurrence_date is required for recurring shifts")
    occ = occurrence_on(shift, occurrence_date)
    if occ is None:
        raise HTTPException(status_code=404, detail="occurrence not found")
    return occ

def is_occurrence_cancelled(db: Session, shift: Shift, occurrence_date: Optional[date]) -> bool:
    if shift.is_cancelled:
        return True
    if occurrence_date is None:
        return False
    exc = get_exception_for_date(db, shift.id, occurrence_date)
    return bool(exc and exc.is_cancelled)

def _candidate(shift: Shift, occ: Occurrence, cancelled: bool) -> SignupCandidate:
    return SignupCandidate(
        shift_id=shift.id,
        occurrence_date=occ.occurrence_date,
        start_at=occ.start_at,
        end_at=occ.end_at,
        capacity=shift.capacity,
        required_skills=shift.station.required_skill_set,
        is_cancelled=cancelled,
        title=shift.title,
    )


# ---------- writes ----------

def create_signup(db: Session, dto: SignupCreate) -> ShiftSignup:
    """
    Evaluate and insert in one transaction. The shift row is locked, the
    confirmed count and the worker's bookings are re-read under the lock,
    and the count is checked again after the insert so two requests racing
    for the last seat cannot both commit.
    """
    shift = db.get(Shift, dto.shift_id, with_for_update=True)
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")

    worker = db.get(Worker, dto.worker_id)
    if not worker or not worker.is_active:
        raise HTTPException(status_code=404, detail="worker not found")

    occ = resolve_occurrence(shift, dto.occurrence_date)
    candidate = _candidate(shift, occ, is_occurrence_cancelled(db, shift, occ.occurrence_date))

    verdict = evaluate_signup(
        candidate,
        worker.skill_set,
        count_confirmed(db, shift.id, occ.occurrence_date),
        get_booked_slots(db, worker.id),
    )
    if not verdict.admissible:
        db.rollback()
        logger.info("Signup of worker %s for shift %s (%s) rejected: %s",
                    worker.id, shift.id, occ.occurrence_date, verdict.reason.value)
        raise SignupRejected(verdict)

    row = ShiftSignup(
        shift_id=shift.id,
        worker_id=worker.id,
        occurrence_date=occ.occurrence_date,
        status=SignupStatus.CONFIRMED,
    )
    db.add(row)
    db.flush()

    if count_confirmed(db, shift.id, occ.occurrence_date) > shift.capacity:
        db.rollback()
        logger.warning("Capacity race on shift %s (%s); signup of worker %s rolled back",
                       dto.shift_id, occ.occurrence_date, dto.worker_id)
        raise SignupRejected(Verdict(RejectionReason.shift_full))

    db.commit()
    db.refresh(row)
    logger.info("Worker %s signed up for shift %s (%s)", row.worker_id, row.shift_id, row.occurrence_date)
    return row

def cancel_signup(
    db: Session,
    *,
    shift_id: int,
    worker_id: int,
    occurrence_date: Optional[date] = None,
) -> ShiftSignup:
    shift = db.get(Shift, shift_id)
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")
    if not shift.is_recurring:
        occurrence_date = None
    elif occurrence_date is None:
        raise HTTPException(status_code=422, detail="occurrence_date is required for recurring shifts")

    stmt = select(ShiftSignup).where(
        ShiftSignup.shift_id == shift_id,
        ShiftSignup.worker_id == worker_id,
        ShiftSignup.status == SignupStatus.CONFIRMED,
        _occurrence_filter(occurrence_date),
    )
    row = db.scalars(stmt).first()
    if not row:
        raise HTTPException(status_code=404, detail="Signup not found")

    # history is kept; a later signup creates a fresh row
    row.status = SignupStatus.CANCELLED
    db.commit()
    db.refresh(row)
    return row


# ---------- worker views ----------

def get_worker_signups(db: Session, worker_id: int) -> List[MySignupSchema]:
    rows = db.execute(
        select(ShiftSignup, Shift)
        .join(Shift, Shift.id == ShiftSignup.shift_id)
        .where(
            ShiftSignup.worker_id == worker_id,
            ShiftSignup.status.in_([SignupStatus.CONFIRMED, SignupStatus.NO_SHOW]),
        )
    ).unique().all()

    out = []
    for signup, shift in rows:
        occ = occurrence_at(shift, signup.occurrence_date)
        out.append(MySignupSchema(
            id=signup.id,
            shift_id=shift.id,
            worker_id=signup.worker_id,
            occurrence_date=signup.occurrence_date,
            status=signup.status,
            created_at=signup.created_at,
            title=shift.title,
            station_id=shift.station_id,
            start_at=occ.start_at,
            end_at=occ.end_at,
        ))
    out.sort(key=lambda s: (s.start_at, s.id), reverse=True)
    return out

def get_available_shifts(
    db: Session,
    worker: Worker,
    *,
    start: datetime,
    end: datetime,
    category: Optional[str] = None,
) -> List[AvailableShiftSchema]:
    """
    Open occurrences in the window with an eligibility badge per row. Counts
    come from a single read and may be stale; create_signup re-checks.
    """
    events = shift_service.get_calendar_events(db, start=start, end=end, category=category)
    events = [e for e in events if not e.is_cancelled and e.confirmed_count < e.capacity]
    if not events:
        return []

    station_ids = {e.station_id for e in events}
    stations = {
        s.id: s for s in db.scalars(select(WorkStation).where(WorkStation.id.in_(station_ids)))
    }
    booked = get_booked_slots(db, worker.id)

    out = []
    for e in events:
        station = stations.get(e.station_id)
        candidate = SignupCandidate(
            shift_id=e.shift_id,
            occurrence_date=e.occurrence_date,
            start_at=e.start_at,
            end_at=e.end_at,
            capacity=e.capacity,
            required_skills=station.required_skill_set if station else frozenset(),
            is_cancelled=e.is_cancelled,
            title=e.title,
        )
        verdict = evaluate_signup(candidate, worker.skill_set, e.confirmed_count, booked)
        out.append(AvailableShiftSchema(
            **e.model_dump(),
            can_signup=verdict.admissible,
            reason=verdict.reason.value if verdict.reason else None,
            missing_skills=sorted(candidate.required_skills - worker.skill_set),
        ))
    return out
