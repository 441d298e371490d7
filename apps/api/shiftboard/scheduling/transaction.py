"""
Create / update / move / delete a shift.

A transaction walks VALIDATING -> (CONFIRMING) -> APPLYING and ends in
COMMITTED or ROLLED_BACK. It may also stop early in REJECTED (hard failure,
nothing touched) or DECLINED (override refused, nothing touched).

Suspension only happens while waiting on the confirmer and while waiting on
the remote write. Once APPLYING starts the transaction cannot be abandoned;
it always ends in COMMITTED or ROLLED_BACK.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Awaitable, Dict, List, Optional
from uuid import uuid4

from shiftboard.scheduling.board import ScheduleBoard
from shiftboard.scheduling.confirmation import Confirmer
from shiftboard.scheduling.conflicts import detect
from shiftboard.scheduling.domain import OPEN_EMP_ID, Placement, Shift, ShiftDraft
from shiftboard.scheduling.errors import (
    ConfirmationDeclined,
    HardOverlap,
    RemoteWriteError,
    RemoteWriteFailure,
    ScheduleError,
    ShiftBusy,
    ShiftLocked,
    ShiftNotFound,
)
from shiftboard.services.validators import validate_time_range

if TYPE_CHECKING:
    from shiftboard.services.gateway import ScheduleGateway

logger = logging.getLogger(__name__)


class TxState(str, enum.Enum):
    VALIDATING = "validating"
    CONFIRMING = "confirming"
    APPLYING = "applying"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    REJECTED = "rejected"
    DECLINED = "declined"


_DONE = {
    "create": "Shift created",
    "update": "Shift saved",
    "move": "Shift moved",
    "delete": "Shift deleted",
}
_FAILED = {
    "create": "Failed to create shift",
    "update": "Failed to update shift",
    "move": "Failed to move shift",
    "delete": "Failed to delete shift",
}


@dataclass
class MutationResult:
    action: str
    state: TxState
    shift: Optional[Shift] = None
    error: Optional[ScheduleError] = None
    overridden: Optional[ScheduleError] = None

    @property
    def ok(self) -> bool:
        return self.state is TxState.COMMITTED

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.message
        return _DONE.get(self.action, "Done")


@dataclass
class MutationTransaction:
    board: ScheduleBoard
    gateway: "ScheduleGateway"
    confirmer: Confirmer
    write_timeout: Optional[float] = None
    lock_finalized: bool = False
    state: TxState = TxState.VALIDATING
    history: List[TxState] = field(default_factory=lambda: [TxState.VALIDATING])
    overridden: Optional[ScheduleError] = None

    # ---------- state helpers ----------
    def _enter(self, state: TxState) -> None:
        logger.debug("Transaction %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _start(self) -> None:
        if len(self.history) > 1:
            raise RuntimeError("A MutationTransaction runs exactly one mutation")

    def _result(self, action: str, state: TxState, shift=None, error=None) -> MutationResult:
        self._enter(state)
        if state is TxState.REJECTED or state is TxState.DECLINED:
            logger.info("%s %s: %s", action, state.value, error.message if error else "")
        return MutationResult(action, state, shift=shift, error=error, overridden=self.overridden)

    def _existing(self, shift_id: str) -> Shift:
        shift = self.board.find_shift(shift_id)
        if shift is None:
            raise ShiftNotFound(shift_id)
        if self.board.store.has_overlay(shift_id):
            raise ShiftBusy(shift_id)
        if self.lock_finalized and shift.is_finalized:
            raise ShiftLocked(shift_id, shift.status)
        return shift

    async def _remote(self, write: Awaitable[Any]) -> Any:
        try:
            if self.write_timeout:
                return await asyncio.wait_for(write, self.write_timeout)
            return await write
        except asyncio.TimeoutError as exc:
            raise RemoteWriteError(f"No response after {self.write_timeout:g}s") from exc

    # ---------- validation ----------
    def _hard_check(self, placement: Placement) -> None:
        validate_time_range(placement.start, placement.end)
        if placement.employee_id is None:
            # open shifts may stack
            return
        overlap = detect(self.board.index, placement).overlap
        if overlap.conflict:
            raise HardOverlap(overlap.shift_ids)

    async def _validate(self, action: str, placement: Placement) -> None:
        self._hard_check(placement)
        if placement.employee_id is None:
            return
        conflict = detect(self.board.index, placement).soft_conflict(action)
        if conflict is None:
            return
        self._enter(TxState.CONFIRMING)
        ok = await self.confirmer.request(conflict.message)
        if not ok:
            raise ConfirmationDeclined(conflict.message, conflict)
        self.overridden = conflict
        # the board may have been refreshed while we were waiting
        self._hard_check(placement)

    # ---------- operations ----------
    async def create(self, draft: ShiftDraft) -> MutationResult:
        self._start()
        start, end = draft.instants(self.board.tz)
        placement = Placement(employee_id=draft.employee_id, start=start, end=end)
        try:
            await self._validate("create", placement)
        except ConfirmationDeclined as exc:
            return self._result("create", TxState.DECLINED, error=exc)
        except ScheduleError as exc:
            return self._result("create", TxState.REJECTED, error=exc)

        self._enter(TxState.APPLYING)
        fields = {
            "employee_id": draft.employee_id,
            "position_id": draft.position_id,
            "location_id": draft.location_id,
            "starts_at": start,
            "ends_at": end,
            "break_minutes": draft.break_minutes,
            "status": "scheduled",
        }
        # reserve the slot until the store answers
        store = self.board.store
        pending_id = f"pending-{uuid4().hex}"
        store.apply(pending_id, Shift(id=pending_id, **fields))
        try:
            created = await self._remote(self.gateway.create_shift(self.board.org_id, fields))
        except RemoteWriteError as exc:
            store.discard(pending_id)
            logger.warning("Create failed remotely: %s", exc)
            failure = RemoteWriteFailure(f"{_FAILED['create']}: {exc}")
            return self._result("create", TxState.ROLLED_BACK, error=failure)
        except BaseException:
            store.discard(pending_id)
            raise
        store.discard(pending_id)
        store.add(created)
        return self._result("create", TxState.COMMITTED, shift=created)

    async def update(self, shift_id: str, draft: ShiftDraft) -> MutationResult:
        self._start()
        try:
            before = self._existing(shift_id)
            start, end = draft.instants(self.board.tz)
            placement = Placement(employee_id=draft.employee_id, start=start, end=end, exclude_shift_id=shift_id)
            await self._validate("update", placement)
            before = self._existing(shift_id)
        except ConfirmationDeclined as exc:
            return self._result("update", TxState.DECLINED, error=exc)
        except ScheduleError as exc:
            return self._result("update", TxState.REJECTED, error=exc)

        changes = {
            "employee_id": draft.employee_id,
            "position_id": draft.position_id,
            "location_id": draft.location_id,
            "starts_at": start,
            "ends_at": end,
            "break_minutes": draft.break_minutes,
        }
        return await self._apply("update", before, changes)

    async def move(self, shift_id: str, employee_id: Optional[str], target_day: date) -> MutationResult:
        """Drop onto another employee and/or day, keeping the time of day."""
        self._start()
        if employee_id == OPEN_EMP_ID:
            employee_id = None
        try:
            before = self._existing(shift_id)
            start, end = moved_instants(before, target_day, self.board.tz)
            placement = Placement(employee_id=employee_id, start=start, end=end, exclude_shift_id=shift_id)
            await self._validate("move", placement)
            before = self._existing(shift_id)
        except ConfirmationDeclined as exc:
            return self._result("move", TxState.DECLINED, error=exc)
        except ScheduleError as exc:
            return self._result("move", TxState.REJECTED, error=exc)

        changes = {"employee_id": employee_id, "starts_at": start, "ends_at": end}
        return await self._apply("move", before, changes)

    async def delete(self, shift_id: str) -> MutationResult:
        self._start()
        try:
            before = self._existing(shift_id)
        except ScheduleError as exc:
            return self._result("delete", TxState.REJECTED, error=exc)
        return await self._apply("delete", before, None)

    # ---------- optimistic apply ----------
    async def _apply(self, action: str, before: Shift, changes: Optional[Dict[str, Any]]) -> MutationResult:
        store = self.board.store
        after = None if changes is None else before.model_copy(update=changes)

        self._enter(TxState.APPLYING)
        store.apply(before.id, after)
        try:
            if changes is None:
                await self._remote(self.gateway.delete_shift(self.board.org_id, before.id))
                echoed = None
            else:
                echoed = await self._remote(self.gateway.update_shift(self.board.org_id, before.id, changes))
        except RemoteWriteError as exc:
            store.discard(before.id)
            logger.warning("%s of shift %s failed remotely, rolled back: %s", action, before.id, exc)
            failure = RemoteWriteFailure(f"{_FAILED[action]}: {exc}")
            return self._result(action, TxState.ROLLED_BACK, shift=before, error=failure)
        except BaseException:
            store.discard(before.id)
            raise

        if changes is None:
            store.commit(before.id)
            return self._result(action, TxState.COMMITTED, shift=before)
        final = echoed if echoed is not None else after
        store.commit(before.id, final)
        return self._result(action, TxState.COMMITTED, shift=final)


def moved_instants(shift: Shift, target_day: date, tz) -> tuple[datetime, datetime]:
    """Same local start time on ``target_day``; duration unchanged."""
    local_start = shift.starts_at.astimezone(tz)
    start = datetime.combine(target_day, local_start.time(), tzinfo=tz)
    return start, start + shift.duration


class ShiftEditor:
    """Runs each mutation in its own transaction against one board."""

    def __init__(
        self,
        board: ScheduleBoard,
        gateway: "ScheduleGateway",
        confirmer: Confirmer,
        write_timeout: Optional[float] = None,
        lock_finalized: bool = False,
    ):
        self.board = board
        self.gateway = gateway
        self.confirmer = confirmer
        self.write_timeout = write_timeout
        self.lock_finalized = lock_finalized

    def transaction(self) -> MutationTransaction:
        return MutationTransaction(
            self.board,
            self.gateway,
            self.confirmer,
            write_timeout=self.write_timeout,
            lock_finalized=self.lock_finalized,
        )

    async def create(self, draft: ShiftDraft) -> MutationResult:
        return await self.transaction().create(draft)

    async def update(self, shift_id: str, draft: ShiftDraft) -> MutationResult:
        return await self.transaction().update(shift_id, draft)

    async def move(self, shift_id: str, employee_id: Optional[str], target_day: date) -> MutationResult:
        return await self.transaction().move(shift_id, employee_id, target_day)

    async def delete(self, shift_id: str) -> MutationResult:
        return await self.transaction().delete(shift_id)
