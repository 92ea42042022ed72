from __future__ import annotations
from datetime import date
from typing import Optional
from pydantic import BaseModel, ConfigDict


class ShiftExceptionSchema(BaseModel):
    id: int
    shift_id: int
    occurrence_date: date
    is_cancelled: bool = True
    notes: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


# PUBLIC payload from clients
class ShiftExceptionCreatePayload(BaseModel):
    occurrence_date: date
    is_cancelled: bool = True
    notes: Optional[str] = None
    model_config = ConfigDict(extra="forbid")


# INTERNAL DTO for the service
class ShiftExceptionCreate(BaseModel):
    shift_id: int
    occurrence_date: date
    is_cancelled: bool = True
    notes: Optional[str] = None
