"""
Immutable value types the conflict engine works with.

Everything here is already normalized: ids are opaque strings, shift
instants are timezone-aware, time off periods are approved and inclusive.
Raw rows are turned into these types by ``shiftboard.scheduling.normalize``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

OPEN_EMP_ID = "OPEN"

ShiftStatus = Literal["scheduled", "published", "completed", "cancelled"]
TimeOffType = Literal["vacation", "sick", "unpaid", "other"]

FINALIZED_STATUSES = ("completed", "cancelled")


def js_weekday(d: date) -> int:
    """0=Sun ... 6=Sat"""
    return d.isoweekday() % 7


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    color: Optional[str] = None


class Employee(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    full_name: str
    avatar_url: Optional[str] = None
    position: Optional[Position] = None


class Shift(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    employee_id: Optional[str] = None
    position_id: Optional[str] = None
    location_id: Optional[str] = None
    starts_at: datetime
    ends_at: datetime
    break_minutes: int = Field(default=0, ge=0)
    status: ShiftStatus = "scheduled"
    position: Optional[Position] = None

    @model_validator(mode="after")
    def _check_range(self) -> "Shift":
        if self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self

    @property
    def owner_id(self) -> str:
        return self.employee_id or OPEN_EMP_ID

    @property
    def is_open(self) -> bool:
        return self.employee_id is None

    @property
    def duration(self) -> timedelta:
        return self.ends_at - self.starts_at

    @property
    def worked_minutes(self) -> int:
        total = int(self.duration.total_seconds() // 60)
        return max(0, total - self.break_minutes)

    @property
    def is_finalized(self) -> bool:
        return self.status in FINALIZED_STATUSES

    def day_key(self, tz: tzinfo) -> date:
        return self.starts_at.astimezone(tz).date()


class AvailabilityRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    employee_id: str
    weekday: int = Field(ge=0, le=6)  # 0=Sun ... 6=Sat
    start_time: time
    end_time: time

    def covers(self, start: time, end: time) -> bool:
        return self.start_time <= start and end <= self.end_time


class TimeOffPeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    employee_id: str
    starts_at: date
    ends_at: date
    type: TimeOffType = "other"

    def includes(self, day: date) -> bool:
        return self.starts_at <= day <= self.ends_at

    @property
    def label(self) -> str:
        return f"Time off • {self.type}"


class Placement(BaseModel):
    """Where a shift would land: the unit every conflict check works on."""

    model_config = ConfigDict(frozen=True)

    employee_id: Optional[str] = None
    start: datetime
    end: datetime
    exclude_shift_id: Optional[str] = None

    @property
    def owner_id(self) -> str:
        return self.employee_id or OPEN_EMP_ID

    def local_start(self, tz: tzinfo) -> datetime:
        return self.start.astimezone(tz)

    def local_end(self, tz: tzinfo) -> datetime:
        return self.end.astimezone(tz)

    def day_key(self, tz: tzinfo) -> date:
        return self.local_start(tz).date()


class ShiftDraft(BaseModel):
    """Form input for creating or editing a shift."""

    employee_id: Optional[str] = None
    day: date
    start_time: time
    end_time: time
    position_id: Optional[str] = None
    location_id: Optional[str] = None
    break_minutes: int = Field(default=0, ge=0)

    def instants(self, tz: tzinfo) -> tuple[datetime, datetime]:
        start = datetime.combine(self.day, self.start_time, tzinfo=tz)
        end = datetime.combine(self.day, self.end_time, tzinfo=tz)
        return start, end


class WeekWindow(BaseModel):
    """Seven consecutive days loaded into the index at once."""

    model_config = ConfigDict(frozen=True)

    start: date

    @classmethod
    def containing(cls, day: date, starts_on: int = 1) -> "WeekWindow":
        back = (js_weekday(day) - starts_on) % 7
        return cls(start=day - timedelta(days=back))

    @property
    def end(self) -> date:
        return self.start + timedelta(days=6)

    @property
    def days(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range(7)]

    def start_instant(self, tz: tzinfo) -> datetime:
        return datetime.combine(self.start, time.min, tzinfo=tz)

    def end_instant(self, tz: tzinfo) -> datetime:
        return datetime.combine(self.start + timedelta(days=7), time.min, tzinfo=tz)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def shifted(self, weeks: int) -> "WeekWindow":
        return WeekWindow(start=self.start + timedelta(weeks=weeks))


class WindowData(BaseModel):
    """Everything the gateway returns for one window."""

    model_config = ConfigDict(frozen=True)

    shifts: tuple[Shift, ...] = ()
    availability: tuple[AvailabilityRange, ...] = ()
    time_off: tuple[TimeOffPeriod, ...] = ()
    employees: tuple[Employee, ...] = ()
