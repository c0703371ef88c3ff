"""FastAPI application factory"""

from fastapi import Depends, FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finwell_gateway.api.dependencies import get_capabilities
from finwell_gateway.api.middleware import RequestContextMiddleware
from finwell_gateway.api.v1 import flags, health, insights, smart_wins
from finwell_gateway.infrastructure.capabilities import Capabilities
from finwell_gateway.infrastructure.observability.logging import setup_logging
from finwell_gateway.config import settings

setup_logging(settings.log_level, settings.service_name)

V1_ROUTERS = (
    (health.router, "health-score"),
    (smart_wins.router, "smart-wins"),
    (insights.router, "insights"),
    (flags.router, "flags"),
)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Finwell Insight Gateway",
        description="Financial health scores, rule flags, insights and smart wins",
        version="0.1.0",
    )
    app.add_middleware(RequestContextMiddleware)

    @app.get("/health")
    def health_check(capabilities: Capabilities = Depends(get_capabilities)):
        """Liveness plus which optional collaborators this process runs with"""
        return {
            "status": "ok",
            "service": settings.service_name,
            "persistence": capabilities.persistence,
            "remote_generation": capabilities.remote_generation,
        }

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for router, tag in V1_ROUTERS:
        app.include_router(router, prefix="/v1", tags=[tag])

    return app


app = create_app()
