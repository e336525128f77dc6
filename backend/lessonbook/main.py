# backend/lessonbook/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST

from . import __version__
from .core.broadcast import connect_broadcast, disconnect_broadcast, is_broadcast_initialized
from .core.config import DEFAULT_SECRET_KEY, is_running_tests, settings
from .database import init_db
from .errors import register_error_handlers
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import bookings as bookings_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

API_TITLE = "Lessonbook API"
API_DESCRIPTION = "Lesson booking between students and teachers with realtime notifications."


def _validate_startup_config() -> None:
    """Refuse to serve production traffic with the development JWT secret."""
    if settings.is_production and (
        settings.secret_key.get_secret_value() == DEFAULT_SECRET_KEY.get_secret_value()
    ):
        raise RuntimeError("Refusing to start: production requires a configured SECRET_KEY")


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{API_TITLE} starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    _validate_startup_config()

    if settings.is_sqlite:
        init_db()

    try:
        await connect_broadcast()
    except Exception as e:
        # Bookings keep working; notifications are dropped until restart
        logger.error(f"Broadcast connection failed, realtime events disabled: {e}")

    if settings.slot_lock_enabled:
        logger.info("Slot lock enabled for booking approvals")

    yield

    logger.info(f"{API_TITLE} shutting down...")
    await disconnect_broadcast()


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)

# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials="*" not in settings.cors_allowed_origins,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s", settings.cors_allowed_origins)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(bookings_v1.router, prefix="/bookings")

app.include_router(api_v1)


@app.get("/health", include_in_schema=False)
def health_check() -> Dict[str, str]:
    return {
        "status": "ok",
        "service": "lessonbook",
        "version": __version__,
        "realtime": "connected" if is_broadcast_initialized() else "disconnected",
    }


@app.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=prometheus_metrics.export(), media_type=CONTENT_TYPE_LATEST)


fastapi_app = app

__all__ = ["app", "fastapi_app"]
