"""Tourism API application: tours, bookings, camping equipment, carts and payments."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.database import close_db, engine, init_db
from .core.exceptions import (
    ProblemDetailsException,
    generic_exception_handler,
    http_exception_handler,
    problem_details_handler,
    request_validation_handler,
)
from .core.middleware import REQUEST_ID_HEADER, setup_middleware
from .core.observability import (
    SERVICE_NAME,
    SERVICE_VERSION,
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .core.uploads import UPLOAD_URL_PREFIX, ensure_upload_dirs
from .routers import (
    auth,
    booking,
    cart,
    equipment,
    health,
    inventory,
    maintenance,
    metrics,
    notification,
    payment,
    stock_order,
    supplier,
    tour,
    tour_payment,
)
from .schemas.common import PROBLEM_RESPONSES
from .services.idempotency_service import REPLAY_HEADER
from .workers.manager import worker_manager

setup_structured_logging()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

ROUTERS = (
    health.router,
    metrics.router,
    auth.router,
    tour.router,
    booking.router,
    equipment.router,
    cart.router,
    payment.router,
    tour_payment.router,
    inventory.router,
    supplier.router,
    supplier.reorder_router,
    stock_order.router,
    maintenance.router,
    notification.router,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Bring up tracing, the schema, upload folders and background workers,
    and tear the workers and connection pool down again on shutdown.
    """
    logger.info("Starting Tourism API", extra={"environment": settings.environment})

    try:
        setup_tracing()
        setup_metrics()
        instrument_sqlalchemy(engine)

        await init_db()
        ensure_upload_dirs()

        if settings.enable_workers:
            await worker_manager.start_all()
    except Exception as e:
        logger.error("Failed to initialize application", extra={"error": str(e)})
        raise

    logger.info("Application startup complete")

    yield

    try:
        await worker_manager.stop_all()
        await close_db()
    except Exception as e:
        logger.error("Error during application cleanup", extra={"error": str(e)})

    logger.info("Application shutdown complete")


def _service_info() -> dict:
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": settings.environment,
        "debug": settings.debug,
        "features": {
            "authentication": True,
            "idempotency": True,
            "tracing": settings.otlp_endpoint is not None,
            "problem_details": True,
            "stock_monitoring": settings.enable_workers,
        },
        "workers": worker_manager.status(),
        "endpoints": {
            "health": "/health",
            "readiness": "/ready",
            "metrics": "/metrics",
            "uploads": UPLOAD_URL_PREFIX,
            "docs": "/docs" if settings.debug else None,
        },
    }


def create_app() -> FastAPI:
    """Build the application with middleware, error handlers, routers and the upload mount."""
    app = FastAPI(
        title="Tourism API",
        description="Backend for tour bookings, camping equipment sales and rentals, carts and payment review",
        version=SERVICE_VERSION,
        debug=settings.debug,
        lifespan=lifespan,
        responses=PROBLEM_RESPONSES,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, REPLAY_HEADER, "traceparent", "tracestate"],
    )
    setup_middleware(app)
    instrument_fastapi(app)

    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_api_route("/info", _service_info, methods=["GET"], tags=["info"], summary="Service information")
    for router in ROUTERS:
        app.include_router(router)

    app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=ensure_upload_dirs()), name="uploads")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tourism_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
