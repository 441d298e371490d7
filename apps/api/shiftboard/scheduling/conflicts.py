"""
Conflict checks for a candidate placement against a ``ScheduleIndex``.

All functions are pure. Intervals are half-open, so a shift ending at 17:00
and another starting at 17:00 do not collide.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from shiftboard.scheduling.domain import Placement, TimeOffPeriod, js_weekday
from shiftboard.scheduling.errors import (
    ScheduleError,
    SoftAvailabilityConflict,
    TimeOffConflict,
)
from shiftboard.scheduling.index import ScheduleIndex


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and a_end > b_start


@dataclass(frozen=True)
class OverlapResult:
    conflict: bool
    shift_ids: Tuple[str, ...] = ()


def find_overlaps(index: ScheduleIndex, placement: Placement) -> OverlapResult:
    """Same owner, same day-key, minus the shift being edited."""
    day = placement.day_key(index.tz)
    hits = tuple(
        s.id
        for s in index.shifts_for(placement.employee_id, day)
        if s.id != placement.exclude_shift_id
        and overlaps(placement.start, placement.end, s.starts_at, s.ends_at)
    )
    return OverlapResult(conflict=bool(hits), shift_ids=hits)


def check_availability(index: ScheduleIndex, placement: Placement) -> bool:
    """
    True when one declared range for the start's weekday contains the whole
    placement. No ranges that weekday (or none at all) means unavailable, and
    so does a placement that runs past local midnight. Open shifts are always
    available.
    """
    if placement.employee_id is None:
        return True
    local_start = placement.local_start(index.tz)
    local_end = placement.local_end(index.tz)
    ranges = index.ranges_for(placement.employee_id, js_weekday(local_start.date()))
    if not ranges or local_end.date() != local_start.date():
        return False
    start_tod, end_tod = local_start.time(), local_end.time()
    return any(r.covers(start_tod, end_tod) for r in ranges)


def find_time_off(index: ScheduleIndex, placement: Placement) -> Optional[TimeOffPeriod]:
    if placement.employee_id is None:
        return None
    day = placement.day_key(index.tz)
    for period in index.time_off_for(placement.employee_id):
        if period.includes(day):
            return period
    return None


def fmt_short(day: date) -> str:
    return f"{day.strftime('%b')} {day.day}"


# question appended to the confirmation prompt, per operation
_TIME_OFF_ASK = {
    "create": "Create shift anyway?",
    "update": "Save anyway?",
    "move": "Override and schedule anyway?",
}
_UNAVAILABLE_ASK = {
    "create": "Create anyway?",
    "update": "Save anyway?",
    "move": "Override?",
}


@dataclass(frozen=True)
class ConflictReport:
    day: date
    overlap: OverlapResult
    time_off: Optional[TimeOffPeriod]
    available: bool

    @property
    def hard_conflict(self) -> bool:
        return self.overlap.conflict

    def soft_conflict(self, action: str = "create") -> Optional[ScheduleError]:
        """The one conflict worth asking about; time off hides an availability gap."""
        if self.time_off is not None:
            label = self.time_off.label.lower()
            return TimeOffConflict(
                f"This employee has approved {label} on {fmt_short(self.day)}. "
                f"{_TIME_OFF_ASK.get(action, _TIME_OFF_ASK['create'])}",
                category=self.time_off.type,
            )
        if not self.available:
            return SoftAvailabilityConflict(
                "This employee is marked unavailable at that time. "
                f"{_UNAVAILABLE_ASK.get(action, _UNAVAILABLE_ASK['create'])}"
            )
        return None


def detect(index: ScheduleIndex, placement: Placement) -> ConflictReport:
    return ConflictReport(
        day=placement.day_key(index.tz),
        overlap=find_overlaps(index, placement),
        time_off=find_time_off(index, placement),
        available=check_availability(index, placement),
    )
