from datetime import date, time
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from shiftboard.scheduling.domain import (
    AvailabilityRange,
    Employee,
    Shift,
    ShiftDraft,
    TimeOffPeriod,
)


class ShiftWriteRequest(BaseModel):
    employee_id: Optional[str] = None  # None = open shift
    shift_date: date
    start_time: time
    end_time: time
    position_id: Optional[str] = None
    location_id: Optional[str] = None
    break_minutes: int = Field(default=0, ge=0)
    override: bool = False  # pre-approve availability / time off conflicts

    def to_draft(self) -> ShiftDraft:
        return ShiftDraft(
            employee_id=self.employee_id,
            day=self.shift_date,
            start_time=self.start_time,
            end_time=self.end_time,
            position_id=self.position_id,
            location_id=self.location_id,
            break_minutes=self.break_minutes,
        )


class ShiftMoveRequest(BaseModel):
    employee_id: Optional[str] = None  # "OPEN" or None moves to open shifts
    target_date: date
    override: bool = False


class MutationOut(BaseModel):
    state: str
    message: str
    shift: Optional[Shift] = None
    overridden: Optional[str] = None


class WeekOut(BaseModel):
    week_start: date
    week_end: date
    timezone: str
    shifts: List[Shift]
    employees: List[Employee]
    availability: List[AvailabilityRange]
    time_off: List[TimeOffPeriod]
    worked_minutes: Dict[str, int]
