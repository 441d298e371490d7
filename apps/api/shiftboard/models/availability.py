import uuid
from sqlalchemy import Column, Time, SmallInteger, ForeignKey, Uuid

from shiftboard.core.database import Base

class EmployeeAvailability(Base):
    __tablename__ = "availability"

    availability_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

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

    weekday = Column(SmallInteger, nullable=False)  # 0=Sun ... 6=Sat
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
