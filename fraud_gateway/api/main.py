"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from fraud_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from fraud_gateway.api.v1 import analysis, profiles, statistics
from fraud_gateway.infrastructure.observability.logging import setup_logging
from fraud_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fraud Gateway",
        description="Real-time transaction risk scoring service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(analysis.router, prefix="/v1", tags=["analysis"])
    app.include_router(profiles.router, prefix="/v1", tags=["profiles"])
    app.include_router(statistics.router, prefix="/v1", tags=["statistics"])

    return app


app = create_app()
