"""FastAPI application entry point."""

import logging
import os

# Configure logging based on ENV environment variable
# ENV=dev: INFO level with detailed format (default)
# ENV=prod/staging: WARNING level, minimal logs
_env = os.getenv("ENV", "dev").lower()
_is_dev = _env == "dev"
_log_level = logging.INFO if _is_dev else logging.WARNING

logging.basicConfig(
    level=_log_level,
    format=(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        if _is_dev
        else "%(levelname)s | %(message)s"
    ),
    datefmt="%H:%M:%S",
)

if _is_dev:
    logging.getLogger("devboard.request").setLevel(logging.INFO)
    logging.getLogger("devboard.exception").setLevel(logging.INFO)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from devboard.api import auth, debug, health, leaderboard, points
from devboard.config import settings
from devboard.database.mongo import close_client, init_database
from devboard.middleware.exception_handlers import register_exception_handlers
from devboard.middleware.request_logging import RequestLoggingMiddleware
from devboard.services.keepalive import start_keepalive, stop_keepalive

logger = logging.getLogger(__name__)

app = FastAPI(
    title="DevBoard Leaderboard API",
    description="Scores GitHub activity and serves a developer leaderboard",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials="*" not in settings.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Trace middleware for request logging and correlation
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(points.router, prefix="/api")
app.include_router(leaderboard.router, prefix="/api")
app.include_router(debug.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    """Application startup tasks."""
    # No try/except: an unreachable store or bad credential must stop startup
    await init_database()

    if settings.ENABLE_DEBUG_ROUTES:
        logger.warning("Debug routes are enabled; raw user records (with tokens) are exposed")

    start_keepalive(settings.KEEPALIVE_URL, settings.KEEPALIVE_INTERVAL_SECONDS)


@app.on_event("shutdown")
async def shutdown_event():
    await stop_keepalive()
    await close_client()
