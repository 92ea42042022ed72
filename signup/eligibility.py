# signup/eligibility.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional


class RejectionReason(str, Enum):
    shift_cancelled = "shift_cancelled"
    shift_full = "shift_full"
    already_signed_up = "already_signed_up"
    time_conflict = "time_conflict"
    missing_skills = "missing_skills"


MESSAGES = {
    RejectionReason.shift_cancelled: "This shift has been cancelled",
    RejectionReason.shift_full: "This shift is full",
    RejectionReason.already_signed_up: "You are already signed up for this shift",
    RejectionReason.time_conflict: "Time conflict with another confirmed shift",
    RejectionReason.missing_skills: "Missing required skills",
}


@dataclass(frozen=True)
class SignupCandidate:
    """The occurrence a worker wants to claim, with everything the checks need."""
    shift_id: int
    occurrence_date: Optional[date]
    start_at: datetime
    end_at: datetime
    capacity: int
    required_skills: frozenset[str] = frozenset()
    is_cancelled: bool = False
    title: str = ""


@dataclass(frozen=True)
class BookedSlot:
    """One of the worker's CONFIRMED signups, at its effective start/end."""
    shift_id: int
    occurrence_date: Optional[date]
    start_at: datetime
    end_at: datetime
    title: str = ""


@dataclass(frozen=True)
class Verdict:
    reason: Optional[RejectionReason] = None
    conflicts: tuple[BookedSlot, ...] = ()
    missing_skills: frozenset[str] = field(default_factory=frozenset)

    @property
    def admissible(self) -> bool:
        return self.reason is None

    @property
    def message(self) -> str:
        return "OK" if self.reason is None else MESSAGES[self.reason]


ADMISSIBLE = Verdict()


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    # half-open intervals; touching shifts do not overlap
    return (a_start < b_end) and (a_end > b_start)


def evaluate_signup(
    candidate: SignupCandidate,
    worker_skills: Iterable[str],
    confirmed_count: int,
    booked: Iterable[BookedSlot],
) -> Verdict:
    """
    Decide whether a worker may claim `candidate`. Checks run in a fixed
    order and stop at the first failure:

    cancelled -> full -> duplicate -> time conflict -> skills.

    Pure: the caller supplies the confirmed count and the worker's booked
    slots. Right before a write both must be re-read inside the same
    transaction; for display a slightly stale count is fine.
    """
    if candidate.is_cancelled:
        return Verdict(RejectionReason.shift_cancelled)

    if confirmed_count >= candidate.capacity:
        return Verdict(RejectionReason.shift_full)

    booked = list(booked)
    key = (candidate.shift_id, candidate.occurrence_date)
    if any((b.shift_id, b.occurrence_date) == key for b in booked):
        return Verdict(RejectionReason.already_signed_up)

    conflicts = tuple(
        b for b in booked
        if overlaps(b.start_at, b.end_at, candidate.start_at, candidate.end_at)
    )
    if conflicts:
        return Verdict(RejectionReason.time_conflict, conflicts=conflicts)

    missing = frozenset(candidate.required_skills) - frozenset(worker_skills)
    if candidate.required_skills and missing:
        return Verdict(RejectionReason.missing_skills, missing_skills=missing)

    return ADMISSIBLE
