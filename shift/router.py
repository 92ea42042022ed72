from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Query, status, HTTPException
from sqlalchemy.orm import Session
from core.config_loader import settings
from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_supervisor
from .schemas import (
    ShiftSchema,
    ShiftCreatePayload,
    ShiftCreate,
    ShiftUpdate,
    CalendarEventSchema,
    AvailableShiftSchema,
)
from shift import service
from signup import service as signup_service

shift_router = APIRouter(prefix="/shifts", tags=["Shifts"])

# One-time shifts; recurring ones are read through /calendar
@shift_router.get("", response_model=list[ShiftSchema])
def list_shifts(
    station_id: Optional[int] = Query(None, description="Filter by work station"),
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    notes: Optional[str] = None,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
):
    return service.get_shifts(
        db,
        station_id=station_id,
        start=start,
        end=end,
        notes=notes,
    )

# Calendar view: concrete occurrences in [start, end]
@shift_router.get("/calendar", response_model=list[CalendarEventSchema])
def calendar(
    start: datetime,
    end: datetime,
    station_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
):
    return service.get_calendar_events(db, start=start, end=end, station_id=station_id)

# Open occurrences with an eligibility badge for the caller
@shift_router.get("/available", response_model=list[AvailableShiftSchema])
def available(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
):
    start = start or datetime.now(timezone.utc)
    end = end or start + timedelta(days=settings.AVAILABLE_WINDOW_DAYS)
    return signup_service.get_available_shifts(db, user, start=start, end=end, category=category)

@shift_router.get("/{shift_id}", response_model=ShiftSchema)
def get_shift(shift_id: int, db: Session = Depends(get_db), user = Depends(get_current_active_user)):
    obj = service.get_shift(db, shift_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Shift not found")
    return obj

@shift_router.post("", response_model=ShiftSchema, status_code=status.HTTP_201_CREATED)
def create_shift(
    payload: ShiftCreatePayload,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    _sup = Depends(require_supervisor),
):
    internal = ShiftCreate(created_by=user.id, **payload.model_dump())
    return service.create_shift(db, internal)

@shift_router.patch("/{shift_id}", response_model=ShiftSchema)
def patch_shift(
    shift_id: int,
    payload: ShiftUpdate,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    _sup = Depends(require_supervisor),
):
    if not service.get_shift(db, shift_id):
        raise HTTPException(status_code=404, detail="Shift not found")
    return service.update_shift(db, shift_id, payload)

@shift_router.delete("/{shift_id}")
def delete_shift(
    shift_id: int,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    _sup = Depends(require_supervisor),
):
    if not service.get_shift(db, shift_id):
        raise HTTPException(status_code=404, detail="Shift not found")
    service.delete_shift(db, shift_id)
    return {"message": "Shift deleted"}
