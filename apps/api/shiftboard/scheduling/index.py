from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Dict, Iterable, List, Optional, Tuple

from shiftboard.scheduling.domain import (
    OPEN_EMP_ID,
    AvailabilityRange,
    Shift,
    TimeOffPeriod,
)

ShiftKey = Tuple[str, date]


@dataclass(frozen=True)
class ScheduleIndex:
    """
    Lookup tables over one window:

      shifts_by_key[(employee id or OPEN, local day)] -> shifts sorted by start
      availability_by_employee[employee id] -> ranges
      time_off_by_employee[employee id] -> approved periods
    """

    tz: tzinfo
    shifts_by_key: Dict[ShiftKey, List[Shift]] = field(default_factory=dict)
    availability_by_employee: Dict[str, List[AvailabilityRange]] = field(default_factory=dict)
    time_off_by_employee: Dict[str, List[TimeOffPeriod]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        shifts: Iterable[Shift],
        availability: Iterable[AvailabilityRange],
        time_off: Iterable[TimeOffPeriod],
        tz: tzinfo,
    ) -> "ScheduleIndex":
        by_key: Dict[ShiftKey, List[Shift]] = defaultdict(list)
        for s in shifts:
            by_key[(s.owner_id, s.day_key(tz))].append(s)
        for bucket in by_key.values():
            bucket.sort(key=lambda s: (s.starts_at, s.id))

        avail: Dict[str, List[AvailabilityRange]] = defaultdict(list)
        for a in availability:
            avail[a.employee_id].append(a)

        off: Dict[str, List[TimeOffPeriod]] = defaultdict(list)
        for t in time_off:
            off[t.employee_id].append(t)

        return cls(
            tz=tz,
            shifts_by_key=dict(by_key),
            availability_by_employee=dict(avail),
            time_off_by_employee=dict(off),
        )

    def shifts_for(self, owner_id: Optional[str], day: date) -> List[Shift]:
        return list(self.shifts_by_key.get((owner_id or OPEN_EMP_ID, day), []))

    def all_shifts(self) -> List[Shift]:
        out = [s for bucket in self.shifts_by_key.values() for s in bucket]
        out.sort(key=lambda s: (s.starts_at, s.id))
        return out

    def ranges_for(self, employee_id: str, weekday: Optional[int] = None) -> List[AvailabilityRange]:
        ranges = self.availability_by_employee.get(employee_id, [])
        if weekday is None:
            return list(ranges)
        return [r for r in ranges if r.weekday == weekday]

    def has_availability_on(self, employee_id: str, weekday: int) -> bool:
        return bool(self.ranges_for(employee_id, weekday))

    def time_off_for(self, employee_id: str) -> List[TimeOffPeriod]:
        return list(self.time_off_by_employee.get(employee_id, []))

    def time_off_label_for(self, employee_id: str, day: date) -> Optional[str]:
        for period in self.time_off_by_employee.get(employee_id, []):
            if period.includes(day):
                return period.label
        return None

    def worked_minutes_for(self, employee_id: Optional[str] = None) -> int:
        """Net minutes (breaks removed); every shift when no employee is given."""
        return sum(
            s.worked_minutes
            for s in self.all_shifts()
            if employee_id is None or s.employee_id == employee_id
        )
