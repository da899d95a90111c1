# backend/tutorbooking/main.py
"""
FastAPI application for the tutor scheduling service.

Run locally with ``uvicorn tutorbooking.main:app --reload`` from ``backend/``.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Response

from .core.config import settings
from .core.constants import API_DESCRIPTION
from .core.request_context import attach_request_id_filter
from .database import init_db
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .middleware.request_id import RequestIdMiddleware
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import instructor_bookings as instructor_bookings_v1
from .routes.v1 import tutor_availability as tutor_availability_v1
from .schemas.base_responses import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
attach_request_id_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Starting {settings.api_title} {settings.api_version} ({settings.environment})")
    if settings.is_sqlite:
        init_db()
    yield
    logger.info("Shutting down")


app = FastAPI(
    title=settings.api_title,
    description=API_DESCRIPTION,
    version=settings.api_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)

register_error_handlers(app)

app.add_middleware(PrometheusMiddleware)
app.add_middleware(RequestIdMiddleware)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(instructor_bookings_v1.router, prefix="/instructor/tutor-bookings")
api_v1.include_router(tutor_availability_v1.router, prefix="/instructor/tutor-availability")
app.include_router(api_v1)


@app.get("/health", response_model=HealthResponse, tags=["health"])
def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", service="tutorbooking", version=settings.api_version)


@app.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
