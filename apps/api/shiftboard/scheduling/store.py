"""
Two-layer shift store.

``committed`` holds what the remote store last told us. ``overlays`` hold
optimistic edits that have not been acknowledged yet, keyed by shift id
(``None`` marks an optimistic delete). The visible state is committed with
overlays laid on top. Rolling back discards an overlay; the reconciler only
ever swaps the committed layer, so in-flight overlays survive a refresh.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from shiftboard.scheduling.domain import Shift

_MISSING = object()


class ShiftStore:
    def __init__(self, shifts: Iterable[Shift] = ()) -> None:
        self._committed: Dict[str, Shift] = {s.id: s for s in shifts}
        self._overlays: Dict[str, Optional[Shift]] = {}
        self.version = 0

    def _bump(self) -> None:
        self.version += 1

    def get(self, shift_id: str) -> Optional[Shift]:
        overlay = self._overlays.get(shift_id, _MISSING)
        if overlay is not _MISSING:
            return overlay
        return self._committed.get(shift_id)

    def committed(self, shift_id: str) -> Optional[Shift]:
        return self._committed.get(shift_id)

    def visible(self) -> List[Shift]:
        merged = dict(self._committed)
        for shift_id, overlay in self._overlays.items():
            if overlay is None:
                merged.pop(shift_id, None)
            else:
                merged[shift_id] = overlay
        return sorted(merged.values(), key=lambda s: (s.starts_at, s.id))

    def has_overlay(self, shift_id: str) -> bool:
        return shift_id in self._overlays

    @property
    def in_flight(self) -> List[str]:
        return list(self._overlays)

    def apply(self, shift_id: str, shift: Optional[Shift]) -> None:
        """Lay an optimistic edit (or delete, with ``None``) over committed state."""
        if shift_id in self._overlays:
            raise RuntimeError(f"Shift {shift_id} already has a mutation in flight")
        self._overlays[shift_id] = shift
        self._bump()

    def discard(self, shift_id: str) -> None:
        if self._overlays.pop(shift_id, _MISSING) is not _MISSING:
            self._bump()

    def commit(self, shift_id: str, confirmed: Optional[Shift] = _MISSING) -> None:
        """
        Fold the overlay into committed state. ``confirmed`` overrides the
        overlay with what the store echoed back.
        """
        overlay = self._overlays.pop(shift_id, None)
        final = overlay if confirmed is _MISSING else confirmed
        if final is None:
            self._committed.pop(shift_id, None)
        else:
            self._committed[shift_id] = final
        self._bump()

    def add(self, shift: Shift) -> None:
        self._committed[shift.id] = shift
        self._bump()

    def replace_committed(self, shifts: Iterable[Shift]) -> None:
        self._committed = {s.id: s for s in shifts}
        self._bump()
