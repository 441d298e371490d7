"""
Persistence/query gateway between the conflict engine and the database.

Rows leave this module only as domain types (see ``scheduling.normalize``).
Every write failure surfaces as ``RemoteWriteError``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, Optional, Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import and_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shiftboard.core.config import settings
from shiftboard.models.availability import EmployeeAvailability
from shiftboard.models.employee import Employee
from shiftboard.models.organization import Organization
from shiftboard.models.shift import Shift as ShiftRow
from shiftboard.models.shift import ShiftStatus
from shiftboard.models.time_off import EmployeeTimeOff, TimeOffStatus
from shiftboard.scheduling import normalize
from shiftboard.scheduling.domain import Shift, WeekWindow, WindowData
from shiftboard.scheduling.errors import RemoteWriteError
from shiftboard.services.changes import note_change

logger = logging.getLogger(__name__)

_ID_FIELDS = ("employee_id", "position_id", "location_id")
_INSTANT_FIELDS = ("starts_at", "ends_at")


class ScheduleGateway(Protocol):
    async def org_timezone(self, org_id: str) -> tzinfo: ...

    async def fetch_window(self, org_id: str, window: WeekWindow) -> WindowData: ...

    async def create_shift(self, org_id: str, fields: Dict[str, Any]) -> Shift: ...

    async def update_shift(self, org_id: str, shift_id: str, changes: Dict[str, Any]) -> Optional[Shift]: ...

    async def delete_shift(self, org_id: str, shift_id: str) -> None: ...

    async def get_shift(self, org_id: str, shift_id: str) -> Optional[Shift]: ...


# ---------- helpers ----------
def _uuid(value: Any) -> Optional[UUID]:
    if value is None or isinstance(value, UUID):
        return value
    return UUID(str(value))


def _utc(value: datetime) -> datetime:
    # SQLite keeps wall time only, so everything is stored as UTC
    return value.astimezone(timezone.utc)


def _row_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    values = dict(fields)
    for name in _ID_FIELDS:
        if name in values:
            values[name] = _uuid(values[name])
    for name in _INSTANT_FIELDS:
        if name in values:
            values[name] = _utc(values[name])
    if "status" in values and not isinstance(values["status"], ShiftStatus):
        values["status"] = ShiftStatus(values["status"])
    return values


def zone(name: Optional[str]) -> ZoneInfo:
    try:
        return ZoneInfo(name or settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown time zone %r, using %s", name, settings.timezone)
        return ZoneInfo(settings.timezone)


class SqlScheduleGateway:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def org_timezone(self, org_id: str) -> ZoneInfo:
        async with self.session_factory() as db:
            return await self._zone(db, _uuid(org_id))

    async def _zone(self, db: AsyncSession, org_uuid: UUID) -> ZoneInfo:
        org = await db.get(Organization, org_uuid)
        return zone(org.timezone if org else None)

    async def fetch_window(self, org_id: str, window: WeekWindow) -> WindowData:
        org_uuid = _uuid(org_id)
        async with self.session_factory() as db:
            tz = await self._zone(db, org_uuid)

            shifts = (
                await db.execute(
                    select(ShiftRow)
                    .where(
                        and_(
                            ShiftRow.org_id == org_uuid,
                            ShiftRow.starts_at >= _utc(window.start_instant(tz)),
                            ShiftRow.starts_at < _utc(window.end_instant(tz)),
                        )
                    )
                    .order_by(ShiftRow.starts_at)
                )
            ).scalars().all()

            employees = (
                await db.execute(
                    select(Employee)
                    .where(
                        and_(
                            Employee.org_id == org_uuid,
                            Employee.is_active == True,  # noqa: E712
                        )
                    )
                    .order_by(Employee.full_name)
                )
            ).scalars().all()

            availability = (
                await db.execute(select(EmployeeAvailability).where(EmployeeAvailability.org_id == org_uuid))
            ).scalars().all()

            time_off = (
                await db.execute(
                    select(EmployeeTimeOff).where(
                        and_(
                            EmployeeTimeOff.org_id == org_uuid,
                            EmployeeTimeOff.status == TimeOffStatus.approved,
                            EmployeeTimeOff.starts_at <= window.end,
                            EmployeeTimeOff.ends_at >= window.start,
                        )
                    )
                )
            ).scalars().all()

            return WindowData(
                shifts=tuple(normalize.to_shift(r) for r in shifts),
                availability=tuple(normalize.to_availability(r) for r in availability),
                time_off=tuple(normalize.approved_time_off(time_off)),
                employees=tuple(normalize.to_employee(r) for r in employees),
            )

    async def _load(self, db: AsyncSession, shift_uuid: UUID) -> Optional[ShiftRow]:
        return (
            await db.execute(
                select(ShiftRow)
                .where(ShiftRow.shift_id == shift_uuid)
                .execution_options(populate_existing=True)
            )
        ).scalars().first()

    async def _owned(self, db: AsyncSession, org_id: str, shift_id: str) -> ShiftRow:
        row = await self._load(db, _uuid(shift_id))
        if row is None or row.org_id != _uuid(org_id):
            raise RemoteWriteError("Scheduled shift not found")
        return row

    async def create_shift(self, org_id: str, fields: Dict[str, Any]) -> Shift:
        try:
            async with self.session_factory() as db:
                row = ShiftRow(org_id=_uuid(org_id), **_row_values(fields))
                db.add(row)
                await db.commit()
                row = await self._load(db, row.shift_id)
                return normalize.to_shift(row)
        except (SQLAlchemyError, ValueError) as exc:
            logger.error("Shift insert failed: %s", exc)
            raise RemoteWriteError(str(exc)) from exc

    async def update_shift(self, org_id: str, shift_id: str, changes: Dict[str, Any]) -> Optional[Shift]:
        try:
            async with self.session_factory() as db:
                row = await self._owned(db, org_id, shift_id)
                for name, value in _row_values(changes).items():
                    setattr(row, name, value)
                await db.commit()
                row = await self._load(db, row.shift_id)
                return normalize.to_shift(row)
        except (SQLAlchemyError, ValueError) as exc:
            logger.error("Shift %s update failed: %s", shift_id, exc)
            raise RemoteWriteError(str(exc)) from exc

    async def delete_shift(self, org_id: str, shift_id: str) -> None:
        try:
            async with self.session_factory() as db:
                row = await self._owned(db, org_id, shift_id)
                await db.delete(row)
                await db.commit()
        except (SQLAlchemyError, ValueError) as exc:
            logger.error("Shift %s delete failed: %s", shift_id, exc)
            raise RemoteWriteError(str(exc)) from exc

    async def publish_window(self, org_id: str, window: WeekWindow) -> int:
        """Flip every scheduled shift in the window to published."""
        org_uuid = _uuid(org_id)
        try:
            async with self.session_factory() as db:
                tz = await self._zone(db, org_uuid)
                result = await db.execute(
                    update(ShiftRow)
                    .where(
                        and_(
                            ShiftRow.org_id == org_uuid,
                            ShiftRow.status == ShiftStatus.scheduled,
                            ShiftRow.starts_at >= _utc(window.start_instant(tz)),
                            ShiftRow.starts_at < _utc(window.end_instant(tz)),
                        )
                    )
                    .values(status=ShiftStatus.published)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount:
                    note_change(db.sync_session, org_uuid, "shifts", "UPDATE")
                await db.commit()
                return result.rowcount or 0
        except (SQLAlchemyError, ValueError) as exc:
            logger.error("Publishing %s failed: %s", window.start, exc)
            raise RemoteWriteError(str(exc)) from exc

    async def get_shift(self, org_id: str, shift_id: str) -> Optional[Shift]:
        try:
            shift_uuid = _uuid(shift_id)
        except ValueError:
            return None
        async with self.session_factory() as db:
            row = await self._load(db, shift_uuid)
            if row is None or row.org_id != _uuid(org_id):
                return None
            return normalize.to_shift(row)
