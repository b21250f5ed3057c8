"""FastAPI application entry point."""

import logging
import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI

import carwash.models  # noqa: F401  registers every mapper before first query
from carwash import __version__
from carwash.api.v1.auth import router as auth_router
from carwash.api.v1.branches import router as branches_router
from carwash.api.v1.customers import router as customers_router
from carwash.api.v1.organizations import router as organizations_router
from carwash.api.v1.pricing import router as pricing_router
from carwash.api.v1.services import router as services_router
from carwash.api.v1.users import router as users_router
from carwash.api.v1.vehicle_brands import router as vehicle_brands_router
from carwash.api.v1.vehicle_models import router as vehicle_models_router
from carwash.api.v1.vehicle_types import router as vehicle_types_router
from carwash.config import settings
from carwash.database import engine
from carwash.errors import register_error_handlers
from carwash.redis_client import close_redis

_json_logs = settings.environment != "development"

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        *([structlog.processors.format_exc_info] if _json_logs else []),
        structlog.processors.JSONRenderer() if _json_logs
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.log_level.upper(), logging.INFO)
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("app_starting", environment=settings.environment)
    yield
    await close_redis()
    await engine.dispose()
    logger.info("app_shutting_down")


app = FastAPI(
    title=settings.app_name,
    description="Multi-tenant car service management API",
    version=__version__,
    lifespan=lifespan,
)

register_error_handlers(app)

# Include routers
app.include_router(auth_router)
app.include_router(organizations_router)
app.include_router(branches_router)
app.include_router(users_router)
app.include_router(vehicle_types_router)
app.include_router(vehicle_brands_router)
app.include_router(vehicle_models_router)
app.include_router(services_router)
app.include_router(customers_router)
app.include_router(pricing_router)


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok", "version": __version__}
