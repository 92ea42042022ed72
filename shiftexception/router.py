from __future__ import annotations
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_supervisor

from .schema import ShiftExceptionSchema, ShiftExceptionCreatePayload, ShiftExceptionCreate
from . import service

shiftexception_router = APIRouter(prefix="/shifts", tags=["Shift Exceptions"])


@shiftexception_router.get("/{shift_id}/exceptions", response_model=list[ShiftExceptionSchema])
def list_exceptions(
    shift_id: int,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    ):
    return service.get_exceptions(db, shift_id=shift_id, start_date=start_date, end_date=end_date)


@shiftexception_router.post("/{shift_id}/exceptions", response_model=ShiftExceptionSchema, status_code=status.HTTP_201_CREATED)
def create_exception(
    shift_id: int,
    payload: ShiftExceptionCreatePayload,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    _sup = Depends(require_supervisor),
    ):
    dto = ShiftExceptionCreate(shift_id=shift_id, **payload.model_dump())
    try:
        return service.create_exception(db, dto)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="an exception already exists for this date")


@shiftexception_router.delete("/{shift_id}/exceptions/{exception_id}")
def delete_exception(
    shift_id: int,
    exception_id: int,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    _sup = Depends(require_supervisor),
    ):
    if not service.delete_exception(db, shift_id, exception_id):
        raise HTTPException(status_code=404, detail="exception not found")
    return {"message": "exception deleted"}
