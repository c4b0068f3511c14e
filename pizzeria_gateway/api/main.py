"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from pizzeria_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from pizzeria_gateway.api.v1 import pix, store
from pizzeria_gateway.infrastructure.clients.efipay import TokenCache
from pizzeria_gateway.infrastructure.observability.logging import setup_logging
from pizzeria_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Pizzeria Gateway",
        description="PIX payment codes and store opening hours",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # One provider token per app instance
    app.state.efipay_token_cache = TokenCache(settings.efipay_token_refresh_margin_seconds)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(pix.router, prefix="/v1", tags=["payments"])
    app.include_router(store.router, prefix="/v1", tags=["store"])

    return app


app = create_app()
