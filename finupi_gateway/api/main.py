"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finupi_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finupi_gateway.api.v1 import score, history, loan
from finupi_gateway.infrastructure.observability.logging import setup_logging
from finupi_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="FinUPI Trust Score Gateway",
        description="UPI trust score, loan eligibility and loan quote service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "score_source": settings.score_source}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(score.router, prefix="/v1", tags=["scores"])
    app.include_router(history.router, prefix="/v1", tags=["history"])
    app.include_router(loan.router, prefix="/v1", tags=["loans"])

    return app


app = create_app()
