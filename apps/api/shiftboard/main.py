from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shiftboard.core.config import settings
from shiftboard.core.logging import configure_logging
from shiftboard.routers.schedule import router as schedule_router


@asynccontextmanager
async def lifespan(app: FastAPI):
  configure_logging(settings.log_level)
  yield


app = FastAPI(title="Shiftboard API", lifespan=lifespan)

# Comma-separated list, e.g.:
# CORS_ORIGINS="http://localhost:3000,https://shiftboard.example.com"
allow_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]

# Safe fallback for local dev if env var not set
if not allow_origins:
  allow_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
  ]

app.add_middleware(
  CORSMiddleware,
  allow_origins=allow_origins,
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)

app.include_router(schedule_router, prefix="/schedules", tags=["schedules"])

@app.get("/health")
def health():
  return {"status": "ok"}
