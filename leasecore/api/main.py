"""FastAPI application for lease extraction, review and analytics."""
import logging

from fastapi import FastAPI

from leasecore import __version__
from leasecore.api.routes import analytics as analytics_routes
from leasecore.api.routes import compliance as compliance_routes
from leasecore.api.routes import extraction as extraction_routes
from leasecore.api.routes import health as health_routes
from leasecore.api.routes import review as review_routes
from leasecore.logging_config import configure_logging
from leasecore.middleware import ErrorHandlerMiddleware, RequestIDMiddleware, register_exception_handlers

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Lease Core API", version=__version__)

    # Last added = outermost: errors are caught around the request id middleware
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    register_exception_handlers(app)

    app.include_router(health_routes.router)
    app.include_router(extraction_routes.router)
    app.include_router(review_routes.router)
    app.include_router(analytics_routes.router)
    app.include_router(compliance_routes.router)
    return app


configure_logging()
app = create_app()
