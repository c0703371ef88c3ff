"""Capability descriptor resolved once per process and injected into the engine"""

import logging
from dataclasses import dataclass
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from finwell_gateway.infrastructure.database.models import ARTIFACT_TABLES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capabilities:
    """Which optional collaborators exist in this deployment"""

    persistence: bool
    remote_generation: bool


def probe_persistence(engine: Engine) -> bool:
    """True when every artifact table exists and the database is reachable"""
    try:
        inspector = inspect(engine)
        missing = [table for table in ARTIFACT_TABLES if not inspector.has_table(table)]
    except SQLAlchemyError as e:
        logger.warning("Artifact store unreachable, running without persistence", extra={"error": str(e)})
        return False

    if missing:
        logger.warning("Artifact tables missing, running without persistence", extra={"missing": missing})
        return False
    return True


def resolve_capabilities(engine: Engine, generation_api_base: str) -> Capabilities:
    capabilities = Capabilities(
        persistence=probe_persistence(engine),
        remote_generation=bool(generation_api_base),
    )
    logger.info(
        "Capabilities resolved",
        extra={"persistence": capabilities.persistence, "remote_generation": capabilities.remote_generation},
    )
    return capabilities
