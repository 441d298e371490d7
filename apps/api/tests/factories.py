"""Builders and an in-memory gateway shared by the tests."""

import asyncio
from datetime import date, datetime, time
from typing import Dict, List, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

from shiftboard.scheduling.domain import (
    AvailabilityRange,
    Employee,
    Shift,
    TimeOffPeriod,
    WeekWindow,
    WindowData,
)
from shiftboard.scheduling.errors import RemoteWriteError

UTC = ZoneInfo("UTC")
ORG = "org-1"

# 2024-04-01 is a Monday
MON = date(2024, 4, 1)
TUE = date(2024, 4, 2)
WED = date(2024, 4, 3)


def at(day: date, hhmm: str, tz=UTC) -> datetime:
    return datetime.combine(day, time.fromisoformat(hhmm), tzinfo=tz)


def make_shift(shift_id: str, employee_id: Optional[str], day: date, start: str, end: str, tz=UTC, **kw) -> Shift:
    return Shift(
        id=shift_id,
        employee_id=employee_id,
        starts_at=at(day, start, tz),
        ends_at=at(day, end, tz),
        **kw,
    )


def avail(employee_id: str, weekday: int, start: str, end: str) -> AvailabilityRange:
    return AvailabilityRange(
        employee_id=employee_id,
        weekday=weekday,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
    )


def vacation(employee_id: str, first: date, last: date, kind: str = "vacation") -> TimeOffPeriod:
    return TimeOffPeriod(id=f"to-{employee_id}-{first}", employee_id=employee_id, starts_at=first, ends_at=last, type=kind)


class FakeGateway:
    """
    In-memory store. ``fail_with`` makes writes fail; ``write_gate`` /
    ``fetch_gate`` hold writes / reads until the test releases them.
    """

    def __init__(self, tz=UTC):
        self.tz = tz
        self.shifts: Dict[str, Shift] = {}
        self.availability: List[AvailabilityRange] = []
        self.time_off: List[TimeOffPeriod] = []
        self.employees: List[Employee] = []
        self.fail_with: Optional[str] = None
        self.write_gate: Optional[asyncio.Event] = None
        self.fetch_gate: Optional[asyncio.Event] = None
        self.writes: List[str] = []
        self.fetches = 0

    def seed(self, *shifts: Shift) -> "FakeGateway":
        for s in shifts:
            self.shifts[s.id] = s
        return self

    async def org_timezone(self, org_id):
        return self.tz

    async def fetch_window(self, org_id, window: WeekWindow) -> WindowData:
        self.fetches += 1
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        start, end = window.start_instant(self.tz), window.end_instant(self.tz)
        return WindowData(
            shifts=tuple(s for s in self.shifts.values() if start <= s.starts_at < end),
            availability=tuple(self.availability),
            time_off=tuple(t for t in self.time_off if t.starts_at <= window.end and t.ends_at >= window.start),
            employees=tuple(self.employees),
        )

    async def _write(self, name: str) -> None:
        self.writes.append(name)
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.fail_with:
            raise RemoteWriteError(self.fail_with)

    async def create_shift(self, org_id, fields) -> Shift:
        await self._write("create")
        shift = Shift(id=str(uuid4()), **fields)
        self.shifts[shift.id] = shift
        return shift

    async def update_shift(self, org_id, shift_id, changes) -> Shift:
        await self._write("update")
        shift = self.shifts[shift_id].model_copy(update=changes)
        self.shifts[shift_id] = shift
        return shift

    async def delete_shift(self, org_id, shift_id) -> None:
        await self._write("delete")
        self.shifts.pop(shift_id, None)

    async def publish_window(self, org_id, window: WeekWindow) -> int:
        await self._write("publish")
        start, end = window.start_instant(self.tz), window.end_instant(self.tz)
        hits = [s for s in self.shifts.values() if s.status == "scheduled" and start <= s.starts_at < end]
        for s in hits:
            self.shifts[s.id] = s.model_copy(update={"status": "published"})
        return len(hits)

    async def get_shift(self, org_id, shift_id) -> Optional[Shift]:
        return self.shifts.get(shift_id)
