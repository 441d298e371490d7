"""
Change notifications for the realtime reconciler.

ORM flushes are recorded per session and published to the feed only once
the transaction commits, so subscribers never hear about rolled-back work.
Bulk statements that bypass the unit of work report through ``note_change``.

The HTTP app builds a fresh board per request and installs nothing. A process
that keeps a board alive installs ``ChangeHooks`` on its session class (e.g.
``ShiftboardSession``) and hands the feed to a ``Reconciler``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List

from sqlalchemy import event
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_PENDING_KEY = "shiftboard_changes"


@dataclass(frozen=True)
class ChangeEvent:
    org_id: str
    table: str
    op: str  # INSERT / UPDATE / DELETE


Subscriber = Callable[[ChangeEvent], None]


class ChangeFeed:
    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)

    def subscribe(self, org_id: str, callback: Subscriber) -> Callable[[], None]:
        self._subscribers[org_id].append(callback)

        def unsubscribe() -> None:
            subs = self._subscribers.get(org_id, [])
            if callback in subs:
                subs.remove(callback)

        return unsubscribe

    def publish(self, change: ChangeEvent) -> None:
        for callback in list(self._subscribers.get(change.org_id, [])):
            try:
                callback(change)
            except Exception:
                logger.exception("Change subscriber failed for %s", change)


def note_change(session: Session, org_id, table: str, op: str) -> None:
    pending = session.info.setdefault(_PENDING_KEY, [])
    pending.append(ChangeEvent(str(org_id), table, op))


class ChangeHooks:
    """Wires a sessionmaker (or Session class) to a feed."""

    def __init__(self, feed: ChangeFeed, target=Session):
        self.feed = feed
        self.target = target
        self.installed = False

    def install(self) -> "ChangeHooks":
        if not self.installed:
            event.listen(self.target, "after_flush", self._collect)
            event.listen(self.target, "after_commit", self._publish)
            event.listen(self.target, "after_soft_rollback", self._discard)
            self.installed = True
        return self

    def remove(self) -> None:
        if self.installed:
            event.remove(self.target, "after_flush", self._collect)
            event.remove(self.target, "after_commit", self._publish)
            event.remove(self.target, "after_soft_rollback", self._discard)
            self.installed = False

    def _collect(self, session, flush_context) -> None:
        for op, objs in (("INSERT", session.new), ("UPDATE", session.dirty), ("DELETE", session.deleted)):
            for obj in objs:
                table = getattr(obj, "__tablename__", None)
                org_id = getattr(obj, "org_id", None)
                if table and org_id is not None:
                    note_change(session, org_id, table, op)

    def _publish(self, session) -> None:
        pending = session.info.pop(_PENDING_KEY, [])
        # one notification per org/table/op per commit
        for change in dict.fromkeys(pending):
            self.feed.publish(change)

    def _discard(self, session, previous_transaction) -> None:
        session.info.pop(_PENDING_KEY, None)
