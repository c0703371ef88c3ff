"""GET /v1/health-score - Composite financial health score"""

import logging
from dataclasses import asdict
from fastapi import APIRouter, Depends, Query, Request

from finwell_gateway.api.v1.schemas import HealthMetricSchema, HealthResponse
from finwell_gateway.api.dependencies import get_insight_engine, get_request_id
from finwell_gateway.services.insight_engine import InsightEngine

router = APIRouter()


@router.get("/health-score", response_model=HealthResponse)
async def get_health_score(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    engine: InsightEngine = Depends(get_insight_engine),
):
    """
    Compute the composite health score from a fresh snapshot.

    Returns:
        Composite score (0-100) and the five weighted metrics
    """
    report = await engine.health(user_id)
    logging.info(
        "Health score computed",
        extra={"request_id": get_request_id(request), "user_id": user_id, "composite_score": report.composite_score},
    )
    return HealthResponse(
        user_id=user_id,
        composite_score=report.composite_score,
        metrics=[HealthMetricSchema(**asdict(m)) for m in report.metrics],
    )
