import enum
import uuid
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, String, Uuid
from sqlalchemy.sql import func

from shiftboard.core.database import Base

class TimeOffType(str, enum.Enum):
    vacation = "vacation"
    sick = "sick"
    unpaid = "unpaid"
    other = "other"

class TimeOffStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    denied = "denied"

class EmployeeTimeOff(Base):
    __tablename__ = "time_off"

    time_off_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    org_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.org_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("employees.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # inclusive on both ends
    starts_at = Column(Date, nullable=False)
    ends_at = Column(Date, nullable=False)

    type = Column(Enum(TimeOffType, name="time_off_type"), nullable=False, default=TimeOffType.other)
    status = Column(Enum(TimeOffStatus, name="time_off_status"), nullable=False, default=TimeOffStatus.pending)

    note = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
