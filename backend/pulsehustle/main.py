"""
PulseHustle API - Main Application Entry Point

This module initializes the FastAPI application with:
- Logging configuration
- Database schema initialization
- Periodic stats refresh scheduler
- CORS middleware for the web client
- Prometheus metrics (/metrics)
- API router registration under /api

Architecture:
    FastAPI App
    ├── Lifespan Management (startup/shutdown)
    ├── CORS Middleware (APP_BASE_URL)
    ├── Prometheus Middleware
    └── API Router (/api)
        ├── /auth      - Sign up, sign in, sign out
        ├── /gigs      - Gig CRUD, status, matches, applications
        ├── /pay, /payments, /price - Payments and pricing
        ├── /profile   - Profiles and applications
        ├── /stats     - Platform counters
        ├── /contact   - Contact form
        └── /admin     - Contact queue and broadcasts
"""

import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pulsehustle.config import get_settings
from pulsehustle.database import init_db
from pulsehustle.api import api_router
from pulsehustle.middleware.metrics import setup_metrics
from pulsehustle.platform import Platform, get_platform
from pulsehustle.scheduler import start_scheduler, stop_scheduler

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
        1. Configure logging
        2. Create database tables
        3. Start the stats refresh scheduler

    Shutdown:
        1. Stop the scheduler
        2. Drain in-flight matching jobs and close the cache
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db()
    if settings.scheduler_enabled:
        start_scheduler()
    logger.info("PulseHustle API started")
    yield
    stop_scheduler()
    await get_platform().close()


app = FastAPI(
    title="PulseHustle API",
    description="Gig marketplace: gigs, payments, matching and stats",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.app_base_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_metrics(app)
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check(platform: Platform = Depends(get_platform)):
    health = {"status": "healthy"}
    if platform.cache is not None:
        health["cache"] = {
            "connected": await platform.cache.health_check(),
            **platform.cache.get_stats(),
        }
    return health
