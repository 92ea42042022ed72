from __future__ import annotations
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user

from .schema import SignupSchema, SignupCreatePayload, SignupCreate, MySignupSchema
from .eligibility import MESSAGES, RejectionReason
from . import service

signup_router = APIRouter(tags=["Signups"])


# Confirmed signups for a shift (optionally one occurrence)
@signup_router.get("/shifts/{shift_id}/signups", response_model=list[SignupSchema])
def list_signups(
    shift_id: int,
    occurrence_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    ):
    return service.get_signups(db, shift_id=shift_id, occurrence_date=occurrence_date)

# Sign the caller up for a shift occurrence
@signup_router.post("/shifts/{shift_id}/signups", response_model=SignupSchema, status_code=status.HTTP_201_CREATED)
def create_signup(
    shift_id: int,
    payload: SignupCreatePayload,
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    ):
    dto = SignupCreate(shift_id=shift_id, worker_id=user.id, **payload.model_dump())
    try:
        return service.create_signup(db, dto)
    except IntegrityError:
        db.rollback()
        reason = RejectionReason.already_signed_up
        raise HTTPException(status_code=409, detail={"reason": reason.value, "message": MESSAGES[reason]})

# Withdraw: the row is kept with status CANCELLED
@signup_router.delete("/shifts/{shift_id}/signups")
def cancel_signup(
    shift_id: int,
    occurrence_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    ):
    service.cancel_signup(db, shift_id=shift_id, worker_id=user.id, occurrence_date=occurrence_date)
    return {"message": "signup cancelled"}

@signup_router.get("/my-shifts", response_model=list[MySignupSchema])
def my_shifts(
    db: Session = Depends(get_db),
    user = Depends(get_current_active_user),
    ):
    return service.get_worker_signups(db, user.id)
