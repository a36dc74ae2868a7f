from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import os

from calendar_app.providers import get_provider
from calendar_app.routers import holidays, countries
from calendar_app.scheduler import start_scheduler, stop_scheduler
from calendar_app.services.cache import HolidayCache
from calendar_app.services.holiday_service import HolidayService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:3000")
API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Holiday Calendar API...")
    cache = HolidayCache()
    provider = get_provider()
    app.state.holiday_service = HolidayService(cache, provider)
    scheduler = start_scheduler(cache)
    logger.info(f"Holiday provider: {provider.provider_name} (configured: {provider.is_configured})")
    yield
    logger.info("Shutting down...")
    stop_scheduler(scheduler)
    cache.clear()


app = FastAPI(
    title="Holiday Calendar API",
    description=(
        "Public holidays per country, cached from Calendarific, "
        "and month / quarter calendar grids with holiday week colouring."
    ),
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(holidays.router,  prefix="/api/holidays",  tags=["holidays"])
app.include_router(countries.router, prefix="/api/countries", tags=["countries"])


@app.get("/", tags=["root"])
async def root():
    return {
        "api": "Holiday Calendar API",
        "version": API_VERSION,
        "docs": "/docs",
    }


@app.get("/health", tags=["root"])
async def health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
