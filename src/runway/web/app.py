"""FastAPI application factory for the Runway API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from runway.analysis import SimulationError
from runway.config import Settings

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: initialize and cleanup resources."""
    settings = app.state.settings
    logger.info("Starting Runway API...")

    from runway.web.cache import CacheService

    app.state.cache = await CacheService.create(settings.redis_url, settings.cache_ttl)

    logger.info("Runway API ready")
    yield

    if app.state.cache:
        await app.state.cache.close()
    logger.info("Runway API shutdown complete")


async def simulation_error_handler(request: Request, exc: SimulationError) -> JSONResponse:
    logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={"error": {"code": exc.code, "message": str(exc)}},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Runway API",
        description="Treasury balance projections under immediate + TWAP liquidation",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.add_exception_handler(SimulationError, simulation_error_handler)
    _register_routers(app)

    return app


def _register_routers(app: FastAPI):
    """Register all API routers."""
    from runway.web.routers.simulation import router as simulation_router
    from runway.web.routers.system import router as system_router

    app.include_router(simulation_router, prefix="/api/v1")
    app.include_router(system_router, prefix="/api/v1")
