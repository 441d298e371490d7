from functools import lru_cache

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./shiftboard.db"

    # Viewer time zone used for day-keys when an organization has none
    timezone: str = "America/Detroit"
    week_starts_on: int = 1  # 0=Sun ... 6=Sat
    remote_write_timeout: float = 10.0  # seconds
    lock_finalized_shifts: bool = False

    log_level: str = "INFO"
    cors_origins: str = ""

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
