"""
Override confirmation: a mutation suspends here until a person says yes or no.

Only one decision is on screen at a time. Requests that arrive while one is
pending wait in FIFO order; nothing is replaced or dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Deque, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class Confirmer(Protocol):
    async def request(self, message: str) -> bool: ...


class OverrideConfirmation:
    def __init__(self) -> None:
        self._queue: Deque[Tuple[str, asyncio.Future]] = deque()
        self._changed = asyncio.Event()

    @property
    def pending(self) -> Optional[str]:
        """Message of the decision currently on screen."""
        return self._queue[0][0] if self._queue else None

    @property
    def waiting(self) -> int:
        """Requests queued behind the one on screen."""
        return max(0, len(self._queue) - 1)

    async def request(self, message: str) -> bool:
        fut = asyncio.get_running_loop().create_future()
        self._queue.append((message, fut))
        if len(self._queue) > 1:
            logger.debug("Override request queued behind %d other(s)", len(self._queue) - 1)
        self._changed.set()
        try:
            return await fut
        finally:
            self._drop(fut)

    def resolve(self, ok: bool) -> None:
        if not self._queue:
            raise RuntimeError("No override request is pending")
        message, fut = self._queue.popleft()
        logger.info("Override %s: %s", "accepted" if ok else "declined", message)
        if not fut.done():
            fut.set_result(ok)
        self._changed.set()

    def cancel_all(self) -> None:
        """Decline every outstanding request (e.g. the view was closed)."""
        while self._queue:
            self.resolve(False)

    async def wait_pending(self) -> str:
        """Block until a decision is on screen and return its message."""
        while not self._queue:
            self._changed.clear()
            await self._changed.wait()
        return self._queue[0][0]

    def _drop(self, fut: asyncio.Future) -> None:
        # a cancelled requester must not keep blocking the line
        for i, (_, queued) in enumerate(self._queue):
            if queued is fut:
                del self._queue[i]
                self._changed.set()
                break


class PresetConfirmation:
    """Answers every request with the same decision, remembering the prompts."""

    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.asked: List[str] = []

    async def request(self, message: str) -> bool:
        self.asked.append(message)
        return self.answer
