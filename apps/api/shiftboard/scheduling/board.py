from __future__ import annotations

import logging
from datetime import tzinfo
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from shiftboard.scheduling.domain import (
    AvailabilityRange,
    Employee,
    Shift,
    TimeOffPeriod,
    WeekWindow,
    WindowData,
)
from shiftboard.scheduling.index import ScheduleIndex
from shiftboard.scheduling.store import ShiftStore

if TYPE_CHECKING:
    from shiftboard.services.gateway import ScheduleGateway

logger = logging.getLogger(__name__)


class ScheduleBoard:
    """One organization's week as the engine sees it."""

    def __init__(self, org_id: str, window: WeekWindow, tz: tzinfo, data: Optional[WindowData] = None):
        self.org_id = org_id
        self.window = window
        self.tz = tz
        self.store = ShiftStore()
        self.employees: Tuple[Employee, ...] = ()
        self.availability: Tuple[AvailabilityRange, ...] = ()
        self.time_off: Tuple[TimeOffPeriod, ...] = ()
        self._refs_version = 0
        self._index: Optional[ScheduleIndex] = None
        self._index_key: Tuple[int, int] = (-1, -1)
        if data is not None:
            self.replace(data)

    @classmethod
    async def load(cls, gateway: "ScheduleGateway", org_id: str, window: WeekWindow, tz: tzinfo) -> "ScheduleBoard":
        board = cls(org_id, window, tz)
        board.replace(await gateway.fetch_window(org_id, window))
        return board

    def replace(self, data: WindowData) -> None:
        """Swap in a fresh read. Optimistic overlays are left alone."""
        self.store.replace_committed(data.shifts)
        self.employees = tuple(data.employees)
        self.availability = tuple(data.availability)
        self.time_off = tuple(data.time_off)
        self._refs_version += 1
        logger.debug(
            "Board %s %s: %d shifts, %d ranges, %d time off, %d overlay(s) kept",
            self.org_id,
            self.window.start,
            len(data.shifts),
            len(data.availability),
            len(data.time_off),
            len(self.store.in_flight),
        )

    async def set_window(self, gateway: "ScheduleGateway", window: WeekWindow) -> None:
        self.window = window
        self.replace(await gateway.fetch_window(self.org_id, window))

    @property
    def index(self) -> ScheduleIndex:
        key = (self.store.version, self._refs_version)
        if self._index is None or key != self._index_key:
            self._index = ScheduleIndex.build(self.store.visible(), self.availability, self.time_off, self.tz)
            self._index_key = key
        return self._index

    def shifts(self) -> List[Shift]:
        return self.store.visible()

    def find_shift(self, shift_id: str) -> Optional[Shift]:
        return self.store.get(shift_id)

    def worked_minutes_by_employee(self) -> Dict[str, int]:
        index = self.index
        return {e.id: index.worked_minutes_for(e.id) for e in self.employees}
