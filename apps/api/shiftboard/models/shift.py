import enum
import uuid
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shiftboard.core.database import Base

from shiftboard.models.employee import Employee  # noqa: F401
from shiftboard.models.location import Location  # noqa: F401
from shiftboard.models.organization import Organization  # noqa: F401
from shiftboard.models.position import Position  # noqa: F401


class ShiftStatus(str, enum.Enum):
    scheduled = "scheduled"
    published = "published"
    completed = "completed"
    cancelled = "cancelled"


class Shift(Base):
    __tablename__ = "shifts"

    shift_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    org_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.org_id", ondelete="CASCADE"), nullable=False)
    # NULL employee_id = open shift
    employee_id = Column(Uuid(as_uuid=True), ForeignKey("employees.employee_id", ondelete="SET NULL"), nullable=True)
    position_id = Column(Uuid(as_uuid=True), ForeignKey("positions.position_id", ondelete="SET NULL"), nullable=True)
    location_id = Column(Uuid(as_uuid=True), ForeignKey("locations.location_id", ondelete="SET NULL"), nullable=True)

    starts_at = Column(DateTime(timezone=True), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=False)
    break_minutes = Column(Integer, nullable=False, default=0)

    status = Column(Enum(ShiftStatus, name="shift_status"), nullable=False, default=ShiftStatus.scheduled)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    position = relationship("Position", lazy="selectin")

    __table_args__ = (
        Index("ix_shifts_org_starts_at", "org_id", "starts_at"),
    )
