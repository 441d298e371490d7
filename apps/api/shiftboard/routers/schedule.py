from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from shiftboard.core.config import settings
from shiftboard.core.database import SessionLocal
from shiftboard.scheduling.board import ScheduleBoard
from shiftboard.scheduling.confirmation import PresetConfirmation
from shiftboard.scheduling.domain import WeekWindow
from shiftboard.scheduling.errors import (
    HardOverlap,
    InvalidRange,
    RemoteWriteError,
    RemoteWriteFailure,
    ShiftBusy,
    ShiftLocked,
    ShiftNotFound,
)
from shiftboard.scheduling.transaction import MutationResult, ShiftEditor, TxState
from shiftboard.schemas.shifts import MutationOut, ShiftMoveRequest, ShiftWriteRequest, WeekOut
from shiftboard.services.gateway import ScheduleGateway, SqlScheduleGateway

router = APIRouter()

_STATUS = {
    HardOverlap: 409,
    ShiftLocked: 409,
    ShiftBusy: 409,
    InvalidRange: 422,
    ShiftNotFound: 404,
    RemoteWriteFailure: 502,
}


def get_gateway() -> ScheduleGateway:
    return SqlScheduleGateway(SessionLocal)


async def _board(gateway: ScheduleGateway, org_id, day: Optional[date]) -> ScheduleBoard:
    org_id = str(org_id)
    tz = await gateway.org_timezone(org_id)
    window = WeekWindow.containing(day or datetime.now(tz).date(), settings.week_starts_on)
    return await ScheduleBoard.load(gateway, org_id, window, tz)


async def _board_with_shift(gateway: ScheduleGateway, org_id, shift_id, day: Optional[date]) -> ScheduleBoard:
    """Board for ``day`` (or the shift's own week) that also knows the shift."""
    org_id, shift_id = str(org_id), str(shift_id)
    shift = await gateway.get_shift(org_id, shift_id)
    if shift is None:
        raise HTTPException(status_code=404, detail="Scheduled shift not found")
    tz = await gateway.org_timezone(org_id)
    board = await _board(gateway, org_id, day or shift.day_key(tz))
    if board.find_shift(shift_id) is None:
        # editing across weeks: the shift lives outside the loaded window
        board.store.add(shift)
    return board


def _editor(board: ScheduleBoard, gateway: ScheduleGateway, override: bool) -> ShiftEditor:
    return ShiftEditor(
        board,
        gateway,
        PresetConfirmation(override),
        write_timeout=settings.remote_write_timeout,
        lock_finalized=settings.lock_finalized_shifts,
    )


def _respond(result: MutationResult):
    if result.ok:
        return MutationOut(
            state=result.state.value,
            message=result.message,
            shift=result.shift,
            overridden=result.overridden.message if result.overridden else None,
        )
    if result.state is TxState.DECLINED:
        return JSONResponse(status_code=409, content={"detail": result.message, "requires_override": True})
    raise HTTPException(status_code=_STATUS.get(type(result.error), 400), detail=result.message)


@router.get("/{org_id}/week", response_model=WeekOut)
async def get_week(
    org_id: UUID,
    day: Optional[date] = Query(None, description="Any date inside the wanted week"),
    gateway: ScheduleGateway = Depends(get_gateway),
):
    board = await _board(gateway, org_id, day)
    return WeekOut(
        week_start=board.window.start,
        week_end=board.window.end,
        timezone=str(board.tz),
        shifts=board.shifts(),
        employees=list(board.employees),
        availability=list(board.availability),
        time_off=list(board.time_off),
        worked_minutes=board.worked_minutes_by_employee(),
    )


@router.post("/{org_id}/shifts")
async def create_shift(org_id: UUID, req: ShiftWriteRequest, gateway: ScheduleGateway = Depends(get_gateway)):
    """Create a shift; soft conflicts need ``override: true``."""
    board = await _board(gateway, org_id, req.shift_date)
    result = await _editor(board, gateway, req.override).create(req.to_draft())
    return _respond(result)


@router.put("/{org_id}/shifts/{shift_id}")
async def update_shift(
    org_id: UUID,
    shift_id: UUID,
    req: ShiftWriteRequest,
    gateway: ScheduleGateway = Depends(get_gateway),
):
    board = await _board_with_shift(gateway, org_id, shift_id, req.shift_date)
    result = await _editor(board, gateway, req.override).update(str(shift_id), req.to_draft())
    return _respond(result)


@router.post("/{org_id}/shifts/{shift_id}/move")
async def move_shift(
    org_id: UUID,
    shift_id: UUID,
    req: ShiftMoveRequest,
    gateway: ScheduleGateway = Depends(get_gateway),
):
    """Drag-and-drop: new employee and/or day, same time of day."""
    board = await _board_with_shift(gateway, org_id, shift_id, req.target_date)
    result = await _editor(board, gateway, req.override).move(str(shift_id), req.employee_id, req.target_date)
    return _respond(result)


@router.delete("/{org_id}/shifts/{shift_id}")
async def delete_shift(org_id: UUID, shift_id: UUID, gateway: ScheduleGateway = Depends(get_gateway)):
    board = await _board_with_shift(gateway, org_id, shift_id, None)
    result = await _editor(board, gateway, False).delete(str(shift_id))
    return _respond(result)


@router.post("/{org_id}/publish")
async def publish_week(
    org_id: UUID,
    day: Optional[date] = Query(None),
    gateway: SqlScheduleGateway = Depends(get_gateway),
):
    """Mark every scheduled shift of the week as published."""
    tz = await gateway.org_timezone(str(org_id))
    window = WeekWindow.containing(day or datetime.now(tz).date(), settings.week_starts_on)
    try:
        count = await gateway.publish_window(str(org_id), window)
    except RemoteWriteError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to publish schedule: {exc}")
    return {"week_start": str(window.start), "published": count}
