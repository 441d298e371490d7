import uuid
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint, Uuid

from shiftboard.core.database import Base

class Position(Base):
    __tablename__ = "positions"

    position_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    org_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.org_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String, nullable=False)
    color = Column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("org_id", "name", name="uq_positions_org_name"),
    )
