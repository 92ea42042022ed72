# recurrence/rule.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from dateutil.parser import isoparse

logger = logging.getLogger(__name__)


class RecurrenceParseError(ValueError):
    """Raised when a stored or submitted recurrence rule does not parse."""


class Frequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class Weekday(str, Enum):
    MO = "MO"
    TU = "TU"
    WE = "WE"
    TH = "TH"
    FR = "FR"
    SA = "SA"
    SU = "SU"

    @property
    def number(self) -> int:
        # 0=Mon .. 6=Sun, same as date.weekday() and dateutil's MO..SU
        return _WEEKDAY_ORDER.index(self)


_WEEKDAY_ORDER = list(Weekday)

_WEEKDAY_NAMES = {
    Weekday.MO: "Monday",
    Weekday.TU: "Tuesday",
    Weekday.WE: "Wednesday",
    Weekday.TH: "Thursday",
    Weekday.FR: "Friday",
    Weekday.SA: "Saturday",
    Weekday.SU: "Sunday",
}

_UNITS = {
    Frequency.DAILY: "day",
    Frequency.WEEKLY: "week",
    Frequency.MONTHLY: "month",
}


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: Frequency
    interval: int = 1
    by_weekday: tuple[Weekday, ...] = ()
    count: Optional[int] = None
    until: Optional[datetime] = None


# ---------- parsing ----------

def _positive_int(key: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise RecurrenceParseError(f"{key} must be an integer, got {raw!r}")
    if value < 1:
        raise RecurrenceParseError(f"{key} must be positive, got {value}")
    return value


def _parse_until(raw: str) -> datetime:
    """
    Accepts RFC 5545 basic form (20250131T235959Z, 20250131) and
    ISO-8601 extended form (2025-01-31T23:59:59Z, 2025-01-31).
    A date-only bound is midnight UTC of that date, as rrule reads it.
    """
    try:
        dt = isoparse(raw.strip())
    except (ValueError, OverflowError):
        raise RecurrenceParseError(f"UNTIL is not a valid instant: {raw!r}")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _rule_body(text: str) -> str:
    # Tolerate "DTSTART:...\nRRULE:FREQ=..." as written by RRULE libraries
    lines = [ln.strip() for ln in text.strip().splitlines() if ln.strip()]
    body = None
    for ln in lines:
        upper = ln.upper()
        if upper.startswith("DTSTART"):
            continue
        if upper.startswith("RRULE:"):
            ln = ln[len("RRULE:"):]
        if body is not None:
            raise RecurrenceParseError("multiple RRULE lines are not supported")
        body = ln
    if not body:
        raise RecurrenceParseError("recurrence rule is empty")
    return body


def parse_rule(text: str) -> RecurrenceRule:
    if text is None:
        raise RecurrenceParseError("recurrence rule is empty")

    fields: dict[str, str] = {}
    for part in _rule_body(text).split(";"):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        if not sep:
            raise RecurrenceParseError(f"malformed segment {part!r}")
        fields[key.strip().upper()] = value.strip()

    raw_freq = fields.get("FREQ")
    if not raw_freq:
        raise RecurrenceParseError("FREQ is required")
    try:
        frequency = Frequency(raw_freq.upper())
    except ValueError:
        raise RecurrenceParseError(f"unsupported FREQ {raw_freq!r}")

    interval = _positive_int("INTERVAL", fields["INTERVAL"]) if "INTERVAL" in fields else 1

    by_weekday: tuple[Weekday, ...] = ()
    raw_days = fields.get("BYDAY", "")
    if raw_days:
        codes = []
        for code in raw_days.split(","):
            code = code.strip().upper()
            if not code:
                continue
            try:
                codes.append(Weekday(code))
            except ValueError:
                raise RecurrenceParseError(f"unknown BYDAY code {code!r}")
        if frequency is Frequency.WEEKLY:
            by_weekday = tuple(sorted(set(codes), key=lambda d: d.number))
        else:
            logger.debug("BYDAY ignored for FREQ=%s", frequency.value)

    if "COUNT" in fields and "UNTIL" in fields:
        raise RecurrenceParseError("COUNT and UNTIL are mutually exclusive")
    count = _positive_int("COUNT", fields["COUNT"]) if "COUNT" in fields else None
    until = _parse_until(fields["UNTIL"]) if "UNTIL" in fields else None

    return RecurrenceRule(
        frequency=frequency,
        interval=interval,
        by_weekday=by_weekday,
        count=count,
        until=until,
    )


def is_valid_rule(text: Optional[str]) -> bool:
    try:
        parse_rule(text)
    except RecurrenceParseError:
        return False
    return True


# ---------- building / describing ----------

def build_rule(rule: RecurrenceRule) -> str:
    parts = [f"FREQ={rule.frequency.value}", f"INTERVAL={rule.interval}"]
    if rule.by_weekday and rule.frequency is Frequency.WEEKLY:
        parts.append("BYDAY=" + ",".join(d.value for d in rule.by_weekday))
    if rule.count is not None and rule.until is not None:
        raise RecurrenceParseError("COUNT and UNTIL are mutually exclusive")
    if rule.count is not None:
        parts.append(f"COUNT={rule.count}")
    if rule.until is not None:
        until = rule.until if rule.until.tzinfo else rule.until.replace(tzinfo=timezone.utc)
        parts.append("UNTIL=" + until.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ"))
    return ";".join(parts)


def describe_rule(text: Optional[str]) -> str:
    """Human readable text for a stored rule, e.g. "every 2 weeks on Monday, Friday, 4 times"."""
    try:
        rule = parse_rule(text)
    except RecurrenceParseError:
        return "Custom recurrence"

    unit = _UNITS[rule.frequency]
    out = f"every {unit}" if rule.interval == 1 else f"every {rule.interval} {unit}s"
    if rule.by_weekday:
        out += " on " + ", ".join(_WEEKDAY_NAMES[d] for d in rule.by_weekday)
    if rule.count is not None:
        out += ", once" if rule.count == 1 else f", {rule.count} times"
    elif rule.until is not None:
        out += f", until {rule.until.date().isoformat()}"
    return out
