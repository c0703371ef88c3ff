"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from finwell_gateway.config import settings
from finwell_gateway.domain.staleness import policy_from_settings
from finwell_gateway.infrastructure.capabilities import Capabilities, resolve_capabilities
from finwell_gateway.infrastructure.clients.aggregator import AggregatorClient
from finwell_gateway.infrastructure.clients.generator import GeneratorClient
from finwell_gateway.infrastructure.database.session import engine, get_db
from finwell_gateway.infrastructure.database.store import ArtifactStore
from finwell_gateway.services.insight_engine import InsightEngine
from finwell_gateway.services.session_cache import SessionCache

_session_cache = SessionCache()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_aggregator_client() -> AggregatorClient:
    """Provide aggregation service client instance"""
    return AggregatorClient()


def get_generator_client() -> GeneratorClient:
    """Provide remote generation client instance"""
    return GeneratorClient()


@lru_cache(maxsize=1)
def get_capabilities() -> Capabilities:
    """Resolved once per process"""
    return resolve_capabilities(engine, settings.generation_api_base)


def get_session_cache() -> SessionCache:
    """Process-wide per-user session cache"""
    return _session_cache


def get_insight_engine(
    db: Session = Depends(get_db),
    capabilities: Capabilities = Depends(get_capabilities),
    cache: SessionCache = Depends(get_session_cache),
    aggregator: AggregatorClient = Depends(get_aggregator_client),
    generator: GeneratorClient = Depends(get_generator_client),
) -> InsightEngine:
    """Assemble an engine for one request"""
    return InsightEngine(
        source=aggregator,
        capabilities=capabilities,
        cache=cache,
        store=ArtifactStore(db),
        generator=generator,
        policy=policy_from_settings(settings),
        history_months=settings.history_months,
        remote_timeout=settings.remote_generation_timeout_seconds,
    )
