from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Session

from shiftboard.core.config import settings

# Load environment variables once, at import time
load_dotenv()

engine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,
)

class ShiftboardSession(Session):
    """Sync session behind every AsyncSession; target for ChangeHooks."""

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    sync_session_class=ShiftboardSession,
    autoflush=False,
    expire_on_commit=False,
)

class Base(DeclarativeBase):
    pass

async def get_db():
    async with SessionLocal() as db:
        yield db
