import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shiftboard.core.database import Base

class Employee(Base):
    __tablename__ = "employees"

    employee_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    org_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.org_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("positions.position_id", ondelete="SET NULL"),
        nullable=True,
    )

    full_name = Column(String, nullable=False)
    avatar_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    position = relationship("Position", lazy="selectin")
