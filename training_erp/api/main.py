"""
Training ERP HTTP application.

create_app wires middleware, error envelopes and the versioned routers;
the module-level ``app`` is what uvicorn serves.

Dependencies: fastapi, uvicorn, training_erp.api.routers
System role: API entry point
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from training_erp.api.routers import (
    deal_sessions_router,
    health_router,
    resource_conflicts_router,
)
from training_erp.api.routers.error_handling import (
    http_exception_handler,
    request_validation_handler,
)
from training_erp.boundary.db import get_async_engine
from training_erp.configs import get_settings
from training_erp.observability import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
    configure_logging,
    get_logger,
)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger = get_logger(__name__)
    logger.info(
        "%s starting",
        app.title,
        extra={"environment": get_settings().environment},
    )

    yield

    await get_async_engine().dispose()
    logger.info("Database connection pool disposed")


def create_app() -> FastAPI:
    """
    Build the application.

    Middleware order matters: CorrelationMiddleware is added last so it
    runs first and the access log line carries the request's ID.
    """
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        description="Deal session provisioning and resource scheduling",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    for router in (health_router, deal_sessions_router, resource_conflicts_router):
        app.include_router(router, prefix=API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("training_erp.api.main:app", host="0.0.0.0", port=8000)
