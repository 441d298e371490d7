import uuid
from sqlalchemy import Column, ForeignKey, Text, Uuid

from shiftboard.core.database import Base


class Location(Base):
    __tablename__ = "locations"

    location_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), ForeignKey("organizations.org_id", ondelete="CASCADE"), nullable=False)

    name = Column(Text, nullable=False)
