from __future__ import annotations
from dataclasses import asdict

from fastapi import APIRouter, Depends

from core.config_loader import settings
from auth.services.auth_service import get_current_active_user

from .schema import (
    RecurrencePreviewPayload,
    RecurrencePreviewResponse,
    RecurrenceConfig,
    RecurrenceBuildResponse,
)
from .rule import Frequency, RecurrenceRule, build_rule, describe_rule
from . import expander

recurrence_router = APIRouter(prefix="/recurring", tags=["Recurrence"])


# Preview the dates a recurring shift would produce before saving it
@recurrence_router.post("/expand", response_model=RecurrencePreviewResponse)
def preview(
    payload: RecurrencePreviewPayload,
    user = Depends(get_current_active_user),
):
    result = expander.preview_occurrences(
        payload.start_at,
        payload.end_at,
        payload.recurrence_rule,
        payload.recurrence_end,
        settings.PREVIEW_MAX_OCCURRENCES,
    )
    return RecurrencePreviewResponse(
        occurrences=[asdict(o) for o in result.occurrences],
        truncated=result.truncated,
        error=result.error,
        description=None if result.error else describe_rule(payload.recurrence_rule),
    )

@recurrence_router.post("/build", response_model=RecurrenceBuildResponse)
def build(
    payload: RecurrenceConfig,
    user = Depends(get_current_active_user),
):
    rule = build_rule(RecurrenceRule(
        frequency=Frequency(payload.frequency),
        interval=payload.interval,
        by_weekday=tuple(sorted(set(payload.by_day), key=lambda d: d.number)) if payload.frequency == "WEEKLY" else (),
        count=payload.count,
        until=payload.until,
    ))
    return RecurrenceBuildResponse(rule=rule, description=describe_rule(rule))
