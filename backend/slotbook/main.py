"""
FastAPI app entrypoint.

Reservations API plus the once-a-minute reminder job (APScheduler, in-process).
"""
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from slotbook.api.routes import notifications, reservations
from slotbook.config import settings
from slotbook.core.constants import REMINDER_JOB_ID
from slotbook.deps import get_gateway
from slotbook.scheduler.reminder_job import run_reminder_dispatch_job

logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # max_instances/coalesce: a slow tick is never overlapped, missed ticks collapse into one
    _scheduler.add_job(
        run_reminder_dispatch_job,
        "interval",
        seconds=settings.dispatch_interval_seconds,
        id=REMINDER_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    _scheduler.start()
    app.state.scheduler = _scheduler
    logger.info(
        "Reminder job scheduled every %ss (timezone %s, transport %s)",
        settings.dispatch_interval_seconds,
        settings.timezone,
        settings.notify_transport,
    )
    yield
    _scheduler.shutdown(wait=False)
    get_gateway().shutdown(wait=False)


app = FastAPI(title="Call Reservations", version="0.1.0", lifespan=lifespan)

# CORS: local dev origins + optional CORS_ORIGINS env (comma-separated)
_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
_cors_extra = os.getenv("CORS_ORIGINS", "")
if _cors_extra:
    _cors_origins.extend(o.strip() for o in _cors_extra.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
app.include_router(notifications.router, tags=["notifications"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Call Reservations API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
