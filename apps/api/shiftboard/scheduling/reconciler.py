"""
Keeps a ScheduleBoard in step with changes made elsewhere.

Every relevant change notification triggers a full re-read of the board's
window followed by a wholesale swap of its committed layer; records are
never patched one by one. Notifications that land while a refresh is
running collapse into a single follow-up refresh.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from shiftboard.scheduling.board import ScheduleBoard

if TYPE_CHECKING:
    from shiftboard.services.changes import ChangeEvent, ChangeFeed
    from shiftboard.services.gateway import ScheduleGateway

logger = logging.getLogger(__name__)

WATCHED_TABLES = ("shifts", "availability", "time_off")


class Reconciler:
    def __init__(self, board: ScheduleBoard, gateway: "ScheduleGateway", feed: Optional["ChangeFeed"] = None):
        self.board = board
        self.gateway = gateway
        self.feed = feed
        self.refreshes = 0
        self._dirty = False
        self._task: Optional[asyncio.Task] = None
        self._unsubscribe = None

    def start(self) -> None:
        if self.feed is not None and self._unsubscribe is None:
            self._unsubscribe = self.feed.subscribe(self.board.org_id, self.notify)

    async def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    def notify(self, event: "ChangeEvent") -> None:
        """Change feed callback; schedules a refresh without waiting for it."""
        if event.org_id != self.board.org_id or event.table not in WATCHED_TABLES:
            return
        logger.debug("Change on %s (%s) for org %s", event.table, event.op, event.org_id)
        self._dirty = True
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._dirty:
            self._dirty = False
            try:
                await self.refresh()
            except Exception:
                # keep the last good read; the next notification retries
                logger.exception("Refresh of org %s failed", self.board.org_id)

    async def refresh(self) -> None:
        window = self.board.window
        data = await self.gateway.fetch_window(self.board.org_id, window)
        if self.board.window != window:
            # the viewer moved on to another week while we were reading
            logger.debug("Dropping stale read for %s", window.start)
            return
        self.board.replace(data)
        self.refreshes += 1

    async def idle(self) -> None:
        """Wait until no refresh is running or queued."""
        while self._task is not None and not self._task.done():
            await asyncio.shield(self._task)
