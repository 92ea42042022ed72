from __future__ import annotations
from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict

from .models import SignupStatus


class SignupSchema(BaseModel):
    id: int
    shift_id: int
    worker_id: int
    occurrence_date: Optional[date] = None
    status: SignupStatus
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# PUBLIC payload from clients
class SignupCreatePayload(BaseModel):
    occurrence_date: Optional[date] = None
    model_config = ConfigDict(extra="forbid")


# INTERNAL DTO for the service
class SignupCreate(BaseModel):
    shift_id: int
    worker_id: int
    occurrence_date: Optional[date] = None


class MySignupSchema(SignupSchema):
    title: str
    station_id: int
    start_at: datetime
    end_at: datetime


class ConflictSchema(BaseModel):
    shift_id: int
    title: str
    occurrence_date: Optional[date] = None
    start_at: datetime
    end_at: datetime


class RejectionSchema(BaseModel):
    reason: str
    message: str
    conflicts: List[ConflictSchema] = []
    missing_skills: List[str] = []
