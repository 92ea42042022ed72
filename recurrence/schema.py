from __future__ import annotations
from datetime import date, datetime
from typing import Optional, List, Literal
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .rule import Weekday


class OccurrenceSchema(BaseModel):
    id: str
    shift_id: Optional[int] = None
    start_at: datetime
    end_at: datetime
    occurrence_date: Optional[date] = None
    model_config = ConfigDict(from_attributes=True)


class RecurrencePreviewPayload(BaseModel):
    start_at: datetime
    end_at: datetime
    recurrence_rule: str = Field(..., min_length=1)
    recurrence_end: Optional[datetime] = None
    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        return self


class RecurrencePreviewResponse(BaseModel):
    occurrences: List[OccurrenceSchema] = []
    truncated: bool = False
    error: Optional[str] = None
    description: Optional[str] = None


# Structured form the recurrence picker sends
class RecurrenceConfig(BaseModel):
    frequency: Literal["DAILY", "WEEKLY", "MONTHLY"]
    interval: int = Field(1, ge=1)
    by_day: List[Weekday] = []
    count: Optional[int] = Field(None, ge=1)
    until: Optional[datetime] = None
    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def one_terminator(self):
        if self.count is not None and self.until is not None:
            raise ValueError("set either count or until, not both")
        return self


class RecurrenceBuildResponse(BaseModel):
    rule: str
    description: str
