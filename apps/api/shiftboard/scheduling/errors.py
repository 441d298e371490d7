from typing import Optional


class ScheduleError(Exception):
    """Base for everything the engine reports back to a caller."""

    overridable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRange(ScheduleError):
    def __init__(self, message: str = "End must be after start."):
        super().__init__(message)


class HardOverlap(ScheduleError):
    def __init__(self, shift_ids=(), message: str = "Overlap detected: conflicts with another shift."):
        super().__init__(message)
        self.shift_ids = tuple(shift_ids)


class SoftAvailabilityConflict(ScheduleError):
    overridable = True


class TimeOffConflict(ScheduleError):
    overridable = True

    def __init__(self, message: str, category: str):
        super().__init__(message)
        self.category = category


class ConfirmationDeclined(ScheduleError):
    def __init__(self, message: str, conflict: Optional[ScheduleError] = None):
        super().__init__(message)
        self.conflict = conflict


class RemoteWriteFailure(ScheduleError):
    pass


class ShiftNotFound(ScheduleError):
    def __init__(self, shift_id: str):
        super().__init__(f"Shift {shift_id} not found.")
        self.shift_id = shift_id


class ShiftLocked(ScheduleError):
    def __init__(self, shift_id: str, status: str):
        super().__init__(f"Shift is {status} and can no longer be changed.")
        self.shift_id = shift_id
        self.status = status


class RemoteWriteError(Exception):
    """Raised by a gateway when the store rejects or fails a write."""


class ShiftBusy(ScheduleError):
    def __init__(self, shift_id: str):
        super().__init__("Another change to this shift is still saving.")
        self.shift_id = shift_id
