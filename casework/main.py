"""Casework routing core — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from casework.adapters.persistence.database import engine
from casework.config import settings
from casework.domain.errors import ConcurrencyConflictError, NotFoundError, ValidationError
from casework.infrastructure.api.routes_health import router as health_router
from casework.infrastructure.api.routes_items import router as items_router
from casework.infrastructure.api.routes_rebalance import router as rebalance_router
from casework.infrastructure.api.routes_sla import router as sla_router
from casework.infrastructure.api.routes_staff import router as staff_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)
    yield
    await engine.dispose()


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _conflict(request: Request, exc: ConcurrencyConflictError) -> JSONResponse:
    logger.warning("Request %s %s hit a concurrent update: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "staff_id": exc.staff_id},
    )


def create_app() -> FastAPI:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Casework routing core",
        description="SLA deadlines, workload-aware assignment and rebalancing",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(ConcurrencyConflictError, _conflict)

    app.include_router(health_router, prefix="/api")
    app.include_router(items_router, prefix="/api")
    app.include_router(staff_router, prefix="/api")
    app.include_router(sla_router, prefix="/api")
    app.include_router(rebalance_router, prefix="/api")

    return app


app = create_app()
