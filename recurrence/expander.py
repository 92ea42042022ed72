# recurrence/expander.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Iterable, Iterator, Optional

from dateutil.rrule import DAILY, MONTHLY, WEEKLY, rrule

from core.config_loader import settings
from .rule import Frequency, RecurrenceParseError, RecurrenceRule, parse_rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Occurrence:
    id: str
    shift_id: Optional[int]
    start_at: datetime
    end_at: datetime
    occurrence_date: Optional[date] = None


@dataclass(frozen=True)
class OccurrencePreview:
    occurrences: list[Occurrence] = field(default_factory=list)
    truncated: bool = False
    error: Optional[str] = None


# ---------- helpers ----------

def _aware(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def _day_of(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return _aware(value).date()
    return value

def occurrence_key(shift_id: Optional[int], start_at: datetime) -> str:
    prefix = "preview" if shift_id is None else str(shift_id)
    return f"{prefix}_{_aware(start_at).isoformat()}"

def cancelled_dates(exceptions: Iterable[Any]) -> set[date]:
    return {_day_of(e.occurrence_date) for e in exceptions if getattr(e, "is_cancelled", False)}


_FREQUENCIES = {
    Frequency.DAILY: DAILY,
    Frequency.WEEKLY: WEEKLY,
    Frequency.MONTHLY: MONTHLY,
}


def to_rrule(rule: RecurrenceRule, dtstart: datetime) -> rrule:
    """dateutil rrule for the parsed rule; COUNT is left to the caller since dtstart always counts."""
    return rrule(
        _FREQUENCIES[rule.frequency],
        dtstart=dtstart,
        interval=rule.interval,
        byweekday=[d.number for d in rule.by_weekday] or None,
        until=rule.until,
        wkst=0,
        cache=False,
    )


# ---------- candidate generation ----------

def _candidates(rule: RecurrenceRule, dtstart: datetime) -> Iterator[datetime]:
    """
    Strictly increasing candidate starts. dtstart is always the first one,
    even when BYDAY does not match it; the caller applies the other stops.
    A rule that steps past the last representable date simply ends.
    """
    yield dtstart
    following = to_rrule(rule, dtstart).xafter(dtstart, inc=False)
    while True:
        try:
            candidate = next(following)
        except StopIteration:
            return
        except (OverflowError, ValueError) as exc:
            logger.debug("Recurrence from %s ran out of representable dates: %s", dtstart, exc)
            return
        yield candidate


def iter_occurrences(
    shift: Any,
    exceptions: Iterable[Any],
    range_start: datetime,
    range_end: datetime,
    *,
    max_occurrences: Optional[int] = None,
    cap_log_level: int = logging.WARNING,
) -> Iterator[Occurrence]:
    """
    Lazily yield the occurrences of `shift` that start inside the closed
    window [range_start, range_end], in ascending order.

    `shift` needs id, start_at, end_at, is_recurring, recurrence_rule and
    recurrence_end (an ORM Shift or anything shaped like one). `exceptions`
    must already be limited to this shift. A malformed rule yields nothing.
    """
    cap = settings.EXPANSION_MAX_OCCURRENCES if max_occurrences is None else max_occurrences
    range_start, range_end = _aware(range_start), _aware(range_end)
    base_start, base_end = _aware(shift.start_at), _aware(shift.end_at)
    duration = base_end - base_start

    if not shift.is_recurring:
        if base_start <= range_end and base_end > range_start and cap > 0:
            yield base_occurrence(shift)
        return

    recurrence_end = _aware(shift.recurrence_end) if shift.recurrence_end else None
    if recurrence_end is not None and recurrence_end < range_start:
        return

    try:
        rule = parse_rule(shift.recurrence_rule)
    except RecurrenceParseError as exc:
        logger.warning("Shift %s has an unparseable recurrence rule %r: %s",
                       shift.id, shift.recurrence_rule, exc)
        return

    bounds = [b for b in (rule.until, recurrence_end, range_end) if b is not None]
    stop_after = min(bounds)
    skipped = cancelled_dates(exceptions)

    produced = 0
    emitted = 0
    for candidate in _candidates(rule, base_start):
        if rule.count is not None and produced >= rule.count:
            break
        if candidate > stop_after:
            break
        produced += 1
        if candidate < range_start:
            continue
        if candidate.date() in skipped:
            continue
        if emitted >= cap:
            logger.log(cap_log_level, "Expansion of shift %s stopped at the %d occurrence cap", shift.id, cap)
            break
        try:
            end_at = candidate + duration
        except OverflowError:
            break
        emitted += 1
        yield Occurrence(
            id=occurrence_key(shift.id, candidate),
            shift_id=shift.id,
            start_at=candidate,
            end_at=end_at,
            occurrence_date=candidate.date(),
        )


def expand_occurrences(
    shift: Any,
    exceptions: Iterable[Any],
    range_start: datetime,
    range_end: datetime,
    *,
    max_occurrences: Optional[int] = None,
    cap_log_level: int = logging.WARNING,
) -> list[Occurrence]:
    return list(iter_occurrences(
        shift, exceptions, range_start, range_end,
        max_occurrences=max_occurrences, cap_log_level=cap_log_level,
    ))


def base_occurrence(shift: Any) -> Occurrence:
    """The definition's own start/end; the only occurrence of a one-time shift."""
    start = _aware(shift.start_at)
    return Occurrence(
        id=occurrence_key(shift.id, start),
        shift_id=shift.id,
        start_at=start,
        end_at=_aware(shift.end_at),
    )


def occurrence_at(shift: Any, occurrence_date: Optional[date]) -> Occurrence:
    """
    Effective start/end of a stored signup's occurrence. Every occurrence of a
    recurring shift keeps the base UTC time of day, so this is a projection,
    not an expansion; it does not check that the rule produces the date.
    """
    if occurrence_date is None or not shift.is_recurring:
        return base_occurrence(shift)
    base_start = _aware(shift.start_at)
    start = datetime.combine(occurrence_date, base_start.timetz())
    return Occurrence(
        id=occurrence_key(shift.id, start),
        shift_id=shift.id,
        start_at=start,
        end_at=start + (_aware(shift.end_at) - base_start),
        occurrence_date=occurrence_date,
    )


def occurrence_on(shift: Any, occurrence_date: date, exceptions: Iterable[Any] = ()) -> Optional[Occurrence]:
    """The occurrence of a recurring shift starting on the given UTC date, if the rule produces one."""
    day_start = datetime.combine(occurrence_date, time.min, tzinfo=timezone.utc)
    day_end = datetime.combine(occurrence_date, time.max, tzinfo=timezone.utc)
    for occ in iter_occurrences(shift, exceptions, day_start, day_end, max_occurrences=1):
        return occ
    return None


# ---------- preview ----------

@dataclass
class _Candidate:
    # Unsaved shift shaped like the ORM row
    start_at: datetime
    end_at: datetime
    recurrence_rule: str
    recurrence_end: Optional[datetime] = None
    id: Optional[int] = None
    is_recurring: bool = True


def preview_occurrences(
    start_at: datetime,
    end_at: datetime,
    recurrence_rule: str,
    recurrence_end: Optional[datetime] = None,
    max_count: Optional[int] = None,
) -> OccurrencePreview:
    """
    Occurrences a not-yet-saved recurring shift would produce, from its
    start until `recurrence_end` or the default preview horizon.
    """
    limit = settings.PREVIEW_MAX_OCCURRENCES if max_count is None else max_count
    start_at = _aware(start_at)
    if recurrence_end:
        horizon = _aware(recurrence_end)
    else:
        try:
            horizon = start_at + timedelta(days=settings.PREVIEW_HORIZON_DAYS)
        except OverflowError:
            horizon = datetime.max.replace(tzinfo=timezone.utc)

    try:
        parse_rule(recurrence_rule)
    except RecurrenceParseError as exc:
        logger.info("Preview rejected recurrence rule %r: %s", recurrence_rule, exc)
        return OccurrencePreview(error=str(exc))

    candidate = _Candidate(
        start_at=start_at,
        end_at=_aware(end_at),
        recurrence_rule=recurrence_rule,
        recurrence_end=horizon,
    )
    # one extra tells us whether the list was cut short; hitting that cap is expected here
    found = expand_occurrences(
        candidate, (), start_at, horizon,
        max_occurrences=limit + 1, cap_log_level=logging.DEBUG,
    )
    return OccurrencePreview(occurrences=found[:limit], truncated=len(found) > limit)
