from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from recurrence.rule import RecurrenceParseError, parse_rule


def _check_rule(is_recurring: bool, rule: Optional[str]) -> None:
    if not is_recurring:
        return
    if not rule:
        raise ValueError("recurrence_rule is required for recurring shifts")
    try:
        parse_rule(rule)
    except RecurrenceParseError as exc:
        raise ValueError(f"invalid recurrence_rule: {exc}")


class ShiftSchema(BaseModel):
    id: int
    title: str
    station_id: int
    start_at: datetime
    end_at: datetime
    capacity: int = 1
    notes: Optional[str] = None
    is_recurring: bool = False
    recurrence_rule: Optional[str] = None
    recurrence_end: Optional[datetime] = None
    is_cancelled: bool = False
    created_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class ShiftCreatePayload(BaseModel):
    title: str = Field(..., min_length=1)
    station_id: int
    start_at: datetime = Field(..., description="TZ-aware ISO8601")
    end_at: datetime = Field(..., description="TZ-aware ISO8601")
    capacity: int = Field(1, ge=1)
    notes: Optional[str] = None
    is_recurring: bool = False
    recurrence_rule: Optional[str] = Field(None, description="e.g. FREQ=WEEKLY;INTERVAL=1;BYDAY=MO,WE")
    recurrence_end: Optional[datetime] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("start_at", "end_at")
    @classmethod
    def tz_aware(cls, dt: datetime) -> datetime:
        if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
            raise ValueError("Datetime must be timezone-aware (e.g., 2025-10-16T09:00:00Z)")
        return dt

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        _check_rule(self.is_recurring, self.recurrence_rule)
        return self

# Internal DTO the service uses
class ShiftCreate(BaseModel):
    title: str
    station_id: int
    start_at: datetime
    end_at: datetime
    capacity: int = Field(1, ge=1)
    notes: Optional[str] = None
    is_recurring: bool = False
    recurrence_rule: Optional[str] = None
    recurrence_end: Optional[datetime] = None
    created_by: Optional[int] = None

class ShiftUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    station_id: Optional[int] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    capacity: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None
    is_cancelled: Optional[bool] = None
    is_recurring: Optional[bool] = None
    recurrence_rule: Optional[str] = None
    recurrence_end: Optional[datetime] = None

    @model_validator(mode="after")
    def check_dates_if_both_present(self):
        if self.start_at is not None and self.end_at is not None and self.start_at >= self.end_at:
            raise ValueError("start_at must be before end_at")
        if self.recurrence_rule is not None:
            _check_rule(True, self.recurrence_rule)
        return self


# ---------- calendar / availability views ----------

class CalendarEventSchema(BaseModel):
    id: str
    shift_id: int
    title: str
    station_id: int
    station_name: Optional[str] = None
    start_at: datetime
    end_at: datetime
    capacity: int
    notes: Optional[str] = None
    is_recurring: bool = False
    is_cancelled: bool = False
    occurrence_date: Optional[date] = None
    confirmed_count: int = 0

class AvailableShiftSchema(CalendarEventSchema):
    can_signup: bool
    reason: Optional[str] = None
    missing_skills: List[str] = []
