"""
Raw record -> domain entity.

Rows come back from the store in loose shapes: ORM objects or mappings,
UUIDs or strings, naive or aware datetimes, ``HH:MM`` strings or ``time``
objects, and embedded relations that may be a single record, a list of
one, or missing. All of that is resolved here so the conflict engine only
ever sees the strict types from ``shiftboard.scheduling.domain``.
"""

from __future__ import annotations

import enum
from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Mapping, Optional

from shiftboard.scheduling.domain import (
    AvailabilityRange,
    Employee,
    Position,
    Shift,
    TimeOffPeriod,
)


def pick_one(value: Any) -> Any:
    """A related record embedded as a list, a single record or nothing."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _get(raw: Any, *names: str, default: Any = None) -> Any:
    for name in names:
        if isinstance(raw, Mapping):
            if name in raw:
                return raw[name]
        elif hasattr(raw, name):
            return getattr(raw, name)
    return default


def _id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


def _instant(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if not isinstance(value, datetime):
        raise ValueError(f"Not an instant: {value!r}")
    # SQLite and some drivers drop the offset; stored instants are UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _clock(value: Any) -> time:
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value))


def to_position(raw: Any) -> Optional[Position]:
    raw = pick_one(raw)
    if raw is None:
        return None
    return Position(
        id=_id(_get(raw, "id", "position_id")),
        name=_get(raw, "name", default=""),
        color=_get(raw, "color"),
    )


def to_employee(raw: Any) -> Employee:
    return Employee(
        id=_id(_get(raw, "id", "employee_id")),
        full_name=_get(raw, "full_name", "name", default=""),
        avatar_url=_get(raw, "avatar_url"),
        position=to_position(_get(raw, "position", "positions")),
    )


def to_shift(raw: Any) -> Shift:
    return Shift(
        id=_id(_get(raw, "id", "shift_id")),
        employee_id=_id(_get(raw, "employee_id")),
        position_id=_id(_get(raw, "position_id")),
        location_id=_id(_get(raw, "location_id")),
        starts_at=_instant(_get(raw, "starts_at")),
        ends_at=_instant(_get(raw, "ends_at")),
        break_minutes=max(0, int(_get(raw, "break_minutes") or 0)),
        status=_enum_value(_get(raw, "status")) or "scheduled",
        position=to_position(_get(raw, "position", "positions")),
    )


def to_availability(raw: Any) -> AvailabilityRange:
    return AvailabilityRange(
        employee_id=_id(_get(raw, "employee_id")),
        weekday=int(_get(raw, "weekday")),
        start_time=_clock(_get(raw, "start_time")),
        end_time=_clock(_get(raw, "end_time")),
    )


def to_time_off(raw: Any) -> Optional[TimeOffPeriod]:
    """``None`` for anything that is not approved."""
    status = _enum_value(_get(raw, "status", default="approved"))
    if status != "approved":
        return None
    return TimeOffPeriod(
        id=_id(_get(raw, "id", "time_off_id")),
        employee_id=_id(_get(raw, "employee_id")),
        starts_at=_date(_get(raw, "starts_at")),
        ends_at=_date(_get(raw, "ends_at")),
        type=_enum_value(_get(raw, "type")) or "other",
    )


def approved_time_off(rows: Iterable[Any]) -> list[TimeOffPeriod]:
    periods = (to_time_off(r) for r in rows)
    return [p for p in periods if p is not None]
