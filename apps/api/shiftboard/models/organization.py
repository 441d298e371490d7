import uuid
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.sql import func

from shiftboard.core.database import Base

class Organization(Base):
    __tablename__ = "organizations"

    org_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    # IANA zone used to resolve the calendar day of a shift
    timezone = Column(String, nullable=False, default="America/Detroit")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
